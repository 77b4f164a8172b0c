from urllib.parse import urlsplit

from flask import jsonify

def success(data=None, message="ok", status=200):
    return jsonify({"status": "success", "message": message, "data": data}), status

def is_local_path(target) -> bool:
    """Vrai pour un chemin interne ("/..."), faux pour une URL absolue ou "//host".

    Les caractères de contrôle et blancs sont refusés : les navigateurs (et Werkzeug
    à l'écriture du header Location) les retirent, "/\\t/host" deviendrait "//host".
    """
    if not target or not isinstance(target, str):
        return False
    if any(ord(c) <= 0x20 or ord(c) == 0x7f for c in target) or "\\" in target:
        return False
    parts = urlsplit(target)
    return (
        not parts.scheme
        and not parts.netloc
        and parts.path.startswith("/")
        and not parts.path.startswith("//")
    )

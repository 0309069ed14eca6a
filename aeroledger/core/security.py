from jose import jwt

from aeroledger.core.config import settings

ALGO = "HS256"

# Tokens are issued by the club's login service; this API only verifies them.


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])

import base64
import hashlib
import hmac
from dataclasses import dataclass
from email.utils import formatdate
from typing import Optional

# The header carries the charset, the signed string only the bare type.
CONTENT_TYPE_HEADER = "application/json;charset=UTF-8"
CONTENT_TYPE_SIGNED = "application/json"


@dataclass(frozen=True)
class SignedRequest:
    content_md5: str
    date: str
    signature: str


def content_md5_b64(body_bytes: bytes) -> str:
    md5 = hashlib.md5()
    md5.update(body_bytes)
    return base64.b64encode(md5.digest()).decode()


def gmt_date(timeval: Optional[float] = None) -> str:
    """RFC 1123 date, e.g. 'Sat, 17 Oct 2026 10:00:00 GMT'."""
    return formatdate(timeval=timeval, usegmt=True)


def make_sign(secret: str, method: str, content_md5: str, content_type: str, date_str: str, resource: str) -> str:
    canonical = f"{method}\n{content_md5}\n{content_type}\n{date_str}\n{resource}"
    digest = hmac.new(secret.encode("utf-8"), canonical.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def sign_request(body_bytes: bytes, path: str, secret: str, timeval: Optional[float] = None) -> SignedRequest:
    """
    Build the Content-MD5, Date and signature values for a POST to `path`.

    `timeval` pins the clock (seconds since the epoch); by default the
    current time is used.
    """
    cmd5 = content_md5_b64(body_bytes)
    date_str = gmt_date(timeval)
    sign = make_sign(secret, "POST", cmd5, CONTENT_TYPE_SIGNED, date_str, path)
    return SignedRequest(content_md5=cmd5, date=date_str, signature=sign)

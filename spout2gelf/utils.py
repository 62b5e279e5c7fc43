import gzip
import io
import zlib


def size_str(size: int) -> str:
    kb = size / 1024
    mb = kb / 1024

    if mb >= 1:
        return f"{mb:.2f}mb"

    if kb >= 1:
        return f"{kb:.2f}kb"

    return f"{size}b"


def gzip_encode(content: bytes) -> bytes:
    out = io.BytesIO()
    with gzip.GzipFile(fileobj=out, mode="w", compresslevel=5) as f:
        f.write(content)
    return out.getvalue()


def zlib_encode(content: bytes) -> bytes:
    return zlib.compress(content, 5)


def identity_encode(content: bytes) -> bytes:
    return content


ENCODERS = {
    "gzip": gzip_encode,
    "zlib": zlib_encode,
    "none": identity_encode,
}

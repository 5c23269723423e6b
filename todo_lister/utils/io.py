import pathlib, chardet

def _looks_binary(data: bytes) -> bool:
    return b"\x00" in data[:8192]

def read_text(path: pathlib.Path) -> str:
    """Decode a file as text, guessing the encoding with chardet.

    Raises OSError when the file cannot be read and ValueError when it holds
    binary content.
    """
    data = path.read_bytes()
    if not data:
        return ""
    if _looks_binary(data):
        raise ValueError("binary content")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass
    enc = chardet.detect(data).get('encoding') or 'utf-8'
    return data.decode(enc, errors='ignore')

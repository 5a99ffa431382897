def to_wire(text):
    """Bytes with CRLF line endings, as they should go over the wire"""
    if text is None:
        return None
    if isinstance(text, str):
        text = bytes(text, "utf-8")
    text = text.replace(b"\n", b"\r\n")
    text = text.replace(b"\r\r\n", b"\r\n")
    return text


def to_normal_str(text):
    """
    Make sure we return a normal string with plain newlines, no matter
    if we were given bytes or str.
    """
    if text is None:
        return text
    if not isinstance(text, str):
        text = text.decode("utf-8")
    text = text.replace("\r\n", "\n")
    return text

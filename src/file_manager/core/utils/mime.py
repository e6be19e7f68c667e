import base64

from file_manager.core.utils.constants import IMAGE_MIME_PREFIX, PDF_MIME_TYPE


def is_image_content_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower().startswith(IMAGE_MIME_PREFIX)


def is_pdf_content_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower() == PDF_MIME_TYPE


def build_data_url(content_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def split_data_url(value: str) -> tuple[str | None, str]:
    """Split ``data:<type>;base64,<payload>`` into ``(type, payload)``.

    Plain base64 strings are returned with a ``None`` type.
    """
    if "," not in value:
        return None, value

    header, payload = value.split(",", 1)
    content_type = None

    if header.startswith("data:"):
        content_type = header[len("data:"):].split(";", 1)[0] or None

    return content_type, payload

import io

from PIL import Image


def make_image(fmt: str = "JPEG", size=(64, 64), color=(200, 120, 80)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def image_parts(field: str, count: int, fmt: str = "JPEG"):
    extension = "jpg" if fmt == "JPEG" else fmt.lower()
    mime = "image/jpeg" if fmt == "JPEG" else f"image/{fmt.lower()}"
    return [
        (field, (f"photo_{i}.{extension}", make_image(fmt), mime))
        for i in range(count)
    ]

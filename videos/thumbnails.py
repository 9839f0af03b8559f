from pathlib import Path

from PIL import Image


def fit_thumbnail(path: Path, max_size: tuple[int, int]) -> tuple[int, int]:
    """
    Shrink the image at `path` in place so it fits within `max_size`, keeping
    its aspect ratio. Images that already fit are left untouched.
    Returns the final (width, height).
    """
    with Image.open(path) as img:
        img.load()
        if img.width <= max_size[0] and img.height <= max_size[1]:
            return img.size
        fitted = img.copy()

    fitted.thumbnail(max_size)
    fitted.save(path, format="PNG")
    return fitted.size

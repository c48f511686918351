import io
import qrcode
from PIL import ImageColor
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.moduledrawers import (
    SquareModuleDrawer, GappedSquareModuleDrawer,
    CircleModuleDrawer, RoundedModuleDrawer
)
from qrcode.image.styles.colormasks import SolidFillColorMask
from flask import current_app

DRAWERS = {
    "square": SquareModuleDrawer,
    "dots": GappedSquareModuleDrawer,
    "circle": CircleModuleDrawer,
    "rounded": RoundedModuleDrawer,
}


def profile_url(username: str) -> str:
    base_url = current_app.config.get("BASE_URL", "http://127.0.0.1:5000").rstrip("/")
    return f"{base_url}/{username}"


def generate_profile_qr(username: str, color_dark: str = "#000000", style: str = "square") -> bytes:
    """
    Render a QR code pointing at the tenant's public profile page.
    Returns PNG bytes; nothing is written to disk.
    """
    try:
        fill_rgb = ImageColor.getrgb(color_dark)
    except ValueError:
        fill_rgb = (0, 0, 0)
    back_rgb = (255, 255, 255)

    drawer = DRAWERS.get((style or "square").lower(), SquareModuleDrawer)()

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(f"{profile_url(username)}?source=qr")
    qr.make(fit=True)

    qr_img = qr.make_image(
        image_factory=StyledPilImage,
        module_drawer=drawer,
        color_mask=SolidFillColorMask(back_color=back_rgb, front_color=fill_rgb)
    ).convert("RGB")

    buf = io.BytesIO()
    qr_img.save(buf, format="PNG")
    return buf.getvalue()

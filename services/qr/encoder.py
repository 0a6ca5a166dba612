# services/qr/encoder.py
"""
URL 문자열을 QR PNG 파일로 렌더링.
오류 정정 H, 여백 1, 400x400 캔버스, 검정/흰색 고정.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError
from PIL import Image

from services.errors import EncodingError

logger = logging.getLogger(__name__)

_ECC_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


@dataclass(frozen=True)
class QrOptions:
    error_correction: str = "H"
    margin: int = 1
    width: int = 400
    dark: str = "#000000"
    light: str = "#ffffff"


DEFAULT_OPTIONS = QrOptions()


def render(target_url: str, destination: str | Path, options: QrOptions = DEFAULT_OPTIONS) -> Path:
    destination = Path(destination)
    qr = qrcode.QRCode(
        version=None,
        error_correction=_ECC_LEVELS[options.error_correction],
        border=options.margin,
    )
    qr.add_data(target_url)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        # qrcode 8.x 는 40 버전 초과를 ValueError("Invalid version") 로 알린다
        raise EncodingError(f"URL too long to encode at level {options.error_correction}") from e

    # 모듈 크기를 캔버스에 맞춘 뒤 정확히 width x width 로 맞춘다
    cells = qr.modules_count + 2 * options.margin
    qr.box_size = max(1, options.width // cells)
    img = qr.make_image(fill_color=options.dark, back_color=options.light).get_image()
    if img.size != (options.width, options.width):
        img = img.resize((options.width, options.width), Image.Resampling.NEAREST)

    try:
        img.save(destination, format="PNG")
    except OSError as e:
        raise EncodingError(f"cannot write QR image to {destination}: {e}") from e

    logger.info("QR rendered: version=%s path=%s", qr.version, destination)
    return destination

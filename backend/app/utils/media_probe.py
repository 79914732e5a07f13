"""Local inspection of uploaded media before it is sent to the blob store"""
from pathlib import Path
import logging

from mutagen import File as MutagenFile, MutagenError
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class MediaProbeError(Exception):
    """Raised when a payload is not the kind of media it claims to be"""


def probe_audio_duration(path: str) -> int:
    """
    Read the duration of an audio file
    
    Args:
        path: Path to the audio file
        
    Returns:
        Duration in whole seconds (at least 1)
    """
    try:
        audio = MutagenFile(str(path))
    except (MutagenError, OSError) as e:
        raise MediaProbeError(f"{Path(path).name} is not readable audio: {e}") from e
    
    if audio is None or getattr(audio, "info", None) is None:
        raise MediaProbeError(f"{Path(path).name} is not a supported audio file")
    
    length = getattr(audio.info, "length", 0) or 0
    return max(1, int(round(length)))


def verify_image(path: str) -> str:
    """
    Check that a file is a decodable image
    
    Returns:
        The image format reported by Pillow (e.g. "PNG")
    """
    try:
        with Image.open(str(path)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise MediaProbeError(f"{Path(path).name} is not a valid image: {e}") from e
    
    logger.debug(f"Verified {image_format} image {Path(path).name}")
    return image_format

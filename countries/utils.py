import os
from datetime import datetime, timezone

from django.conf import settings
from PIL import Image, ImageDraw, ImageFont


class Config:

    @property
    def environment(self) -> str:
        return settings.APP_ENVIRONMENT

    @property
    def cache_path(self) -> str:
        """Return absolute cache directory path (writable)."""
        if self.environment == "production":
            path = "/tmp/cache"
        else:
            path = os.path.abspath(settings.CACHE_DIR)
        os.makedirs(path, exist_ok=True)
        return path


config = Config()


def get_summary_image_path():
    """Return full path to the summary image in the writable cache."""
    return os.path.join(config.cache_path, "summary.png")


def _load_fonts():
    try:
        return ImageFont.truetype("arial.ttf", 28), ImageFont.truetype("arial.ttf", 20)
    except OSError:
        return ImageFont.load_default(), ImageFont.load_default()


def generate_summary_image(total_countries, top_countries, timestamp):
    """
    Generate a summary PNG showing total countries, top 5 GDP countries,
    and last refresh timestamp. Saves image to cache path.
    """
    path = get_summary_image_path()

    img = Image.new("RGB", (800, 500), color="white")
    draw = ImageDraw.Draw(img)
    font_title, font_body = _load_fonts()

    # Header
    draw.text((20, 20), "Country Summary Report", fill="black", font=font_title)
    draw.text((20, 70), f"Total Countries: {total_countries}", fill="black", font=font_body)
    draw.text((20, 120), "Top 5 Countries by Estimated GDP:", fill="black", font=font_body)

    y = 160
    if not top_countries:
        draw.text((40, y), "No GDP data available.", fill="gray", font=font_body)
    else:
        for rank, c in enumerate(top_countries, start=1):
            draw.text((40, y), f"{rank}. {c.name}: {round(c.estimated_gdp or 0, 2):,}", fill="blue", font=font_body)
            y += 30

    if isinstance(timestamp, datetime):
        timestamp = timestamp.isoformat()
    draw.text((20, 400), f"Last Refresh: {timestamp or 'never'}", fill="black", font=font_body)

    img.save(path, "PNG")
    return path


def get_now():
    """Return current UTC datetime (aware)."""
    return datetime.now(timezone.utc)

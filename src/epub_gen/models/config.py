"""Build configuration models."""

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_STYLESHEET = """\
body {
  margin: 0 5%;
  line-height: 1.5;
}
h1, h2, h3 {
  text-align: center;
}
p {
  margin: 0 0 0.8em 0;
}
img {
  max-width: 100%;
  height: auto;
}
.cover {
  margin: 0;
  padding: 0;
  text-align: center;
}
.cover img {
  max-height: 100%;
}
"""


class BuildConfig(BaseModel):
    """Options for a single build call."""

    model_config = ConfigDict(frozen=True)

    embed_images: bool = True
    modified: datetime | None = None  # None = time of the build
    max_workers: int = Field(default=1, ge=1)
    compression_level: int = Field(default=9, ge=0, le=9)
    stylesheet: str = DEFAULT_STYLESHEET

    def modified_timestamp(self) -> str:
        """Return the dcterms:modified value (UTC, second precision)."""
        moment = self.modified or datetime.now(timezone.utc)
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


class ToMemory(BaseModel):
    """Output target: return the archive as bytes."""


class ToPath(BaseModel):
    """Output target: write the archive to a file."""

    path: Path


OutputTarget = ToMemory | ToPath

"""File link formatting for cited and generated files.

Maps assistant file ids to readable names and to the local download route.
"""

import re
from collections.abc import Mapping

from assistant_chat.config import ClientConfig

# Prefix some service versions put in front of file labels
_FILE_ICON_PREFIX = re.compile(r"^📄\s+")
_LABEL_SPECIAL = re.compile(r"[\\\[\]]")


class FileLinks:
    """Builds names, URLs and markdown markers for assistant files.

    Known file ids are named from an injected mapping. Unknown ids fall back
    to the id itself, stripped of an icon prefix and given a .pdf extension
    when it has none.
    """

    def __init__(
        self,
        file_route: str = "/api/files",
        file_names: Mapping[str, str] | None = None,
        display_name_limit: int = 40,
    ) -> None:
        self.file_route = file_route.rstrip("/")
        self._file_names = dict(file_names or {})
        self._display_name_limit = display_name_limit

    @classmethod
    def from_config(cls, config: ClientConfig) -> "FileLinks":
        return cls(
            file_route=config.file_route,
            file_names=config.file_names,
            display_name_limit=config.display_name_limit,
        )

    def name_for(self, file_id: str) -> str:
        """Return the display file name for a file id."""
        if file_id in self._file_names:
            return self._file_names[file_id]

        name = _FILE_ICON_PREFIX.sub("", file_id)
        if "." not in name:
            name = f"{name}.pdf"
        return name

    def url_for(self, file_id: str) -> str:
        return f"{self.file_route}/{file_id}"

    def marker_for(self, file_id: str) -> str:
        """Return the markdown citation marker pointing at a file.

        Brackets and backslashes in the name are backslash-escaped so the
        label cannot end the marker early.
        """
        label = _LABEL_SPECIAL.sub(r"\\\g<0>", self.name_for(file_id))
        return f"[{label}]({self.url_for(file_id)})"

    def image_for(self, file_id: str) -> str:
        """Return the markdown image embed for a generated image file."""
        return f"\n![{file_id}]({self.url_for(file_id)})\n"

    def short_name(self, name: str) -> str:
        """Truncate long file names for display."""
        if len(name) > self._display_name_limit:
            return name[: self._display_name_limit - 3] + "..."
        return name

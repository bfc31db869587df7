"""Render targets for the panel - optional slots plus an HTML writer."""
import html
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

from display_mappers import format_aqi_line, indicator_class

WEATHER_ICON = "weather-text-icon"
WEATHER_TEXT = "weather-text"
AQI_TEXT = "aqi-text"
AQI_DOT = "aqi-dot"

ALL_SLOTS = (WEATHER_ICON, WEATHER_TEXT, AQI_TEXT, AQI_DOT)


@dataclass
class Slot:
    """A single output element: its text content and class attribute."""
    text: str = ""
    class_name: str = ""


class Page:
    """
    The set of output slots the panel renders into.

    Every slot is optional. Writing to a slot the page does not have is a
    no-op, so a page hosting only the AQI line still works.
    """

    def __init__(self, slots=ALL_SLOTS):
        """
        Args:
            slots: Names of the slots this page hosts
        """
        self._slots: Dict[str, Slot] = {name: Slot() for name in slots}

    def slot(self, name: str) -> Optional[Slot]:
        return self._slots.get(name)

    def text(self, name: str) -> Optional[str]:
        """Get the text of a slot (None when the page has no such slot)."""
        slot = self.slot(name)
        return slot.text if slot else None

    def class_name(self, name: str) -> Optional[str]:
        slot = self.slot(name)
        return slot.class_name if slot else None

    def set_text(self, name: str, text: str) -> None:
        slot = self.slot(name)
        if slot is not None:
            slot.text = text

    def set_class(self, name: str, class_name: str) -> None:
        slot = self.slot(name)
        if slot is not None:
            slot.class_name = class_name

    def set_weather(self, icon: str, text: str) -> None:
        self.set_text(WEATHER_ICON, icon)
        self.set_text(WEATHER_TEXT, text)

    def set_aqi(self, aqi_value, label: str, color: str) -> None:
        self.set_text(AQI_TEXT, format_aqi_line(aqi_value, label))
        self.set_class(AQI_DOT, indicator_class(color))

    def set_aqi_message(self, text: str) -> None:
        """Show a bare message in the AQI line, leaving the indicator untouched."""
        self.set_text(AQI_TEXT, text)

    def to_html(self) -> str:
        """Render the hosted slots as an HTML fragment."""
        parts = []
        for name, slot in self._slots.items():
            attrs = f'id="{name}"'
            if slot.class_name:
                attrs += f' class="{html.escape(slot.class_name)}"'
            parts.append(f"<span {attrs}>{html.escape(slot.text)}</span>")
        return '<div class="weather-box" dir="auto">\n  ' + "\n  ".join(parts) + "\n</div>\n"

    def save(self, path: str) -> None:
        """
        Write the HTML fragment to path, replacing the previous file.

        Raises:
            OSError: If the file cannot be written
        """
        tmp_path = f"{path}.tmp"
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(self.to_html())
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logging.debug(f"Page written to {path}")

"""Native folder picker for ``lz fastls``."""

import logging

from lz.errors import PickerUnavailable

logger = logging.getLogger(__name__)


def pick_folder(title: str = "Choose a folder to list") -> str | None:
    """
    Show the platform's folder dialog.

    Returns:
        The chosen directory, or None if the dialog was cancelled.

    Raises:
        PickerUnavailable: if no GUI toolkit or display is available.
    """
    try:
        import tkinter as tk
        from tkinter import filedialog
    except ImportError as exc:
        raise PickerUnavailable("Folder picker needs tkinter, which is not installed") from exc

    try:
        root = tk.Tk()
    except tk.TclError as exc:
        raise PickerUnavailable(f"Cannot open folder picker: {exc}") from exc
    try:
        root.withdraw()
        chosen = filedialog.askdirectory(parent=root, title=title, mustexist=True)
    finally:
        root.destroy()

    if not chosen:
        logger.info("Folder picker cancelled")
        return None
    return chosen

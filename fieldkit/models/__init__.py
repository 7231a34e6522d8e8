from fieldkit.models.entry import Entry, EntryStatus

__all__ = ["Entry", "EntryStatus"]

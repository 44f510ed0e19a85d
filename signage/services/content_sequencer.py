from signage.services.layout_expander import ContentEntry


def sequence(entries: list[ContentEntry]) -> list[ContentEntry]:
    # sorted() is stable: equal display orders keep their input order.
    # No dedup: one content may sit in two layers.
    return sorted(entries, key=lambda entry: entry.display_order)

class SymbolInterner:
    """
    Insertion-ordered, deduplicating table of the symbols used by one encode
    session.

    Ids are dense and start at 0; the first use of a text fixes its id and
    its position in ``symbols()``. An interner belongs to a single encode
    call and is never shared, so concurrent encodes stay independent.
    """
    def __init__(self) -> None:
        self._ids: dict[str, int] = {}

    def intern(self, text: str) -> int:
        sid = self._ids.get(text)
        if sid is None:
            sid = len(self._ids)
            self._ids[text] = sid
        return sid

    def id_of(self, text: str) -> int | None:
        return self._ids.get(text)

    def symbols(self) -> tuple[str, ...]:
        # dict preserves insertion order, which is the id order
        return tuple(self._ids)

    def __contains__(self, text: object) -> bool:
        return text in self._ids

    def __len__(self) -> int:
        return len(self._ids)

import threading


def parse_file_list(payload):
    """
    Parses the payload of a file list reply: comma separated paths, of which only the final
    path segment is kept.
    >>> sorted(parse_file_list("a/b/f1,c/f2"))
    ['f1', 'f2']
    >>> sorted(parse_file_list("/meadow0/App.exe, App.exe,,"))
    ['App.exe']
    >>> parse_file_list("")
    frozenset()
    """
    names = (path.strip().rsplit('/', 1)[-1] for path in payload.split(','))
    return frozenset(n for n in names if n)


class FileInventoryCache:
    """
    The last known set of file names on the device.
    The set is only ever replaced as a whole, so readers see either the previous or the new snapshot.
    """

    def __init__(self, names=()):
        self._snapshot = frozenset(names)
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> frozenset:
        return self._snapshot

    @property
    def empty(self):
        return not self._snapshot

    def __contains__(self, name):
        return name in self._snapshot

    def __len__(self):
        return len(self._snapshot)

    def __iter__(self):
        return iter(self._snapshot)

    def replace(self, names) -> frozenset:
        snapshot = frozenset(names)
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def without(self, name) -> frozenset:
        """ replaces the snapshot with one that does not contain the given name. """
        with self._lock:
            self._snapshot = self._snapshot - {name}
            return self._snapshot

    def clear(self):
        return self.replace(())

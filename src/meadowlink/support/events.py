import threading


class EventSource(object):
    """
    Broadcasts each fired event to every registered handler.
    Handlers may be added or removed from any thread, including from within a handler while an event is being fired.
    """

    def __init__(self):
        self._handlers = []
        self._lock = threading.RLock()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        with self._lock:
            self._handlers.append(handler)
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def subscribe(self, handler, predicate=None):
        """
        Registers a handler that only receives the events matching the predicate.
        :param handler: called with each matching event.
        :param predicate: a callable taking the event. When None, all events are delivered.
        :return: the Subscription used to unregister the handler.
        """
        subscription = Subscription(self, handler, predicate)
        self.add(subscription)
        return subscription

    def handlers(self):
        with self._lock:
            return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def fire_all(self, events):
        self._fire_all(events)

    def _fire_all(self, events):
        for e in events:
            self._fire(e)

    def _fire(self, *args, **kwargs):
        for handler in self.handlers():
            handler(*args, **kwargs)


class Subscription:
    """
    A filtered registration on an EventSource. Cancelling removes the registration exactly once,
    no matter how many times or from how many threads cancel() is called.
    """

    def __init__(self, source: EventSource, handler, predicate=None):
        self.source = source
        self.handler = handler
        self.predicate = predicate
        self._active = True
        self._lock = threading.Lock()

    def __call__(self, event, *args, **kwargs):
        if not self._active:
            return
        if self.predicate is None or self.predicate(event):
            self.handler(event, *args, **kwargs)

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> bool:
        """
        :return: True if this call removed the subscription, False if it was already cancelled.
        """
        with self._lock:
            if not self._active:
                return False
            self._active = False
        self.source.remove(self)
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cancel()

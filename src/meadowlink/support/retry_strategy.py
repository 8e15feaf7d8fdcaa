from meadowlink.support.mixins import CommonEqualityMixin


class RetryStrategy:
    """
    Decides if an awaited device operation that timed out is issued again.
    Called with the number of attempts made so far.
    """
    def __call__(self, attempts):
        return False


class NoRetry(RetryStrategy, CommonEqualityMixin):
    """ The default policy: a timed-out operation is reported to the caller as is. """

    def __repr__(self):
        return 'NoRetry()'


class BoundedRetry(RetryStrategy, CommonEqualityMixin):

    def __init__(self, retries):
        """
        :param retries: how many times an operation may be re-issued after the first attempt.
        """
        if retries < 0:
            raise ValueError("retries must not be negative: %s" % retries)
        self.retries = retries

    def __call__(self, attempts):
        return attempts <= self.retries


def retry_strategy_for(retries):
    """
    >>> retry_strategy_for(0)
    NoRetry()
    >>> retry_strategy_for(2).retries
    2
    """
    return BoundedRetry(retries) if retries else NoRetry()

import unittest
from unittest.mock import Mock

from hamcrest import assert_that, calling, is_, raises

from meadowlink.conduit.base import Conduit, DefaultConduit


class ConduitTest(unittest.TestCase):

    def test_abstract(self):
        sut = Conduit()
        assert_that(calling(lambda: sut.target), raises(NotImplementedError))
        assert_that(calling(lambda: sut.input), raises(NotImplementedError))
        assert_that(calling(lambda: sut.output), raises(NotImplementedError))
        assert_that(calling(lambda: sut.open), raises(NotImplementedError))
        assert_that(calling(sut.close), raises(NotImplementedError))


class DefaultConduitTest(unittest.TestCase):

    def test_single_stream_used_for_both_directions(self):
        stream = Mock()
        sut = DefaultConduit(stream)
        assert_that(sut.input, is_(stream))
        assert_that(sut.output, is_(stream))

    def test_separate_streams(self):
        read, write = Mock(), Mock()
        sut = DefaultConduit(read, write, target="loopback")
        assert_that(sut.input, is_(read))
        assert_that(sut.output, is_(write))
        assert_that(sut.target, is_("loopback"))

    def test_close_closes_streams_once(self):
        read, write = Mock(), Mock()
        sut = DefaultConduit(read, write)
        assert_that(sut.open, is_(True))
        sut.close()
        sut.close()
        assert_that(sut.open, is_(False))
        read.close.assert_called_once_with()
        write.close.assert_called_once_with()

    def test_close_shared_stream_once(self):
        stream = Mock()
        sut = DefaultConduit(stream)
        sut.close()
        stream.close.assert_called_once_with()

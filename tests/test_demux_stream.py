"""Tests for the composed fragment stream."""

import httpx
import pytest

from hookrelay.core.exceptions import StreamTooLargeError
from hookrelay.demux import ResponseDemultiplexer, aggregate, demultiplex

TWO_TURNS = (
    '{"type":"begin"}{"type":"item","content":"A"}{"type":"end"}'
    '{"type":"begin"}{"type":"item","content":"B"}{"type":"end"}'
)

# Multi-byte characters, escapes, a malformed object, markers and a plain tail
MIXED_TRANSCRIPT = (
    '{"type":"begin","metadata":{"nodeId":"agent"}}\n'
    '{"type":"item","content":"Grüße 🌍 "}\n'
    '{"type":"item","content":"a \\"quoted {brace}\\" value"}\n'
    '{"type":"end"}\n'
    '{"type":"metadata","data":{}}\n'
    '{broken json}\n'
    '{"type":"begin"}\n'
    '{"text":"zweiter Zug"}\n'
    '{"type":"end"}\n'
    'trailing plain text\n'
).encode("utf-8")


def _feed_all(chunks, **kwargs):
    demux = ResponseDemultiplexer(**kwargs)
    fragments = []
    for chunk in chunks:
        fragments.extend(demux.feed(chunk))
    fragments.extend(demux.finish())
    return fragments


class TestResponseDemultiplexer:
    """Synchronous feed/finish behaviour."""

    def test_turn_separator_between_turns(self):
        assert _feed_all([TWO_TURNS.encode()]) == ["A", "\n\n", "B"]

    def test_single_turn_has_no_leading_separator(self):
        body = b'{"type":"begin"}{"type":"item","content":"Only"}{"type":"end"}'
        assert _feed_all([body]) == ["Only"]

    def test_single_object_yields_content_by_priority(self):
        assert _feed_all([b'{"output":"o","message":"m"}']) == ["o"]

    def test_ignored_object_yields_nothing(self):
        assert _feed_all([b'{"type":"metadata","content":"x"}']) == []

    def test_plain_text_passes_through(self):
        assert _feed_all([b"hello"]) == ["hello"]

    def test_invalid_json_yields_nothing(self):
        assert _feed_all([b"{invalid}"]) == []

    def test_over_nested_object_does_not_end_stream(self):
        nested = b'{"a":' * 100000 + b"1" + b"}" * 100000
        body = b'{"content":"A"}' + nested + b'{"content":"B"}'
        assert _feed_all([body]) == ["A", "B"]

    def test_escaped_quote_and_brace(self):
        body = rb'{"content":"a \"quoted {brace}\" value"}'
        assert _feed_all([body]) == ['a "quoted {brace}" value']

    def test_mixed_transcript(self):
        assert _feed_all([MIXED_TRANSCRIPT]) == [
            "Grüße 🌍 ",
            'a "quoted {brace}" value',
            "\n\n",
            "zweiter Zug",
            "\n\n",
            "trailing plain text",
        ]

    def test_separator_before_trailing_plain_text(self):
        body = b'{"content":"A"}{"type":"end"}tail'
        assert _feed_all([body]) == ["A", "\n\n", "tail"]

    def test_truncated_trailing_object_is_dropped(self):
        body = b'{"content":"A"}{"content":"never closed'
        assert _feed_all([body]) == ["A"]

    def test_fragments_emitted_as_soon_as_objects_complete(self):
        demux = ResponseDemultiplexer()
        assert demux.feed(b'{"content":"A"}{"cont') == ["A"]
        assert demux.feed(b'ent":"B"}') == ["B"]
        assert demux.finish() == []

    @pytest.mark.parametrize("transcript", [TWO_TURNS.encode(), MIXED_TRANSCRIPT])
    def test_split_at_every_byte_boundary_is_invariant(self, transcript):
        expected = _feed_all([transcript])
        for cut in range(1, len(transcript)):
            assert _feed_all([transcript[:cut], transcript[cut:]]) == expected, cut

    def test_byte_by_byte_delivery_is_invariant(self):
        expected = _feed_all([MIXED_TRANSCRIPT])
        chunks = [MIXED_TRANSCRIPT[i:i + 1] for i in range(len(MIXED_TRANSCRIPT))]
        assert _feed_all(chunks) == expected

    def test_three_way_splits_are_invariant(self):
        expected = _feed_all([MIXED_TRANSCRIPT])
        size = len(MIXED_TRANSCRIPT)
        for first in range(1, size, 7):
            for second in range(first + 1, size, 11):
                chunks = [
                    MIXED_TRANSCRIPT[:first],
                    MIXED_TRANSCRIPT[first:second],
                    MIXED_TRANSCRIPT[second:],
                ]
                assert _feed_all(chunks) == expected

    def test_split_multibyte_plain_text_is_reassembled(self):
        data = "naïve".encode("utf-8")
        assert _feed_all([data[:3], data[3:]]) == ["naïve"]

    def test_overflow_raises(self):
        demux = ResponseDemultiplexer(max_buffer_size=16)
        assert demux.feed(b'{"content":"A"}') == ["A"]
        with pytest.raises(StreamTooLargeError):
            demux.feed(b'{"content":"' + b"x" * 32)

    def test_extracted_objects_do_not_count_against_ceiling(self):
        demux = ResponseDemultiplexer(max_buffer_size=20)
        fragments = []
        for _ in range(10):
            fragments.extend(demux.feed(b'{"content":"abc"}'))
        assert fragments == ["abc"] * 10

    def test_eleven_mebibytes_of_unterminated_json_overflows(self):
        demux = ResponseDemultiplexer()
        with pytest.raises(StreamTooLargeError):
            demux.feed(b'{"content":"' + b"x" * (11 * 1024 * 1024))

    def test_finish_is_idempotent(self):
        demux = ResponseDemultiplexer()
        demux.feed(b"tail")
        assert demux.finish() == ["tail"]
        assert demux.finish() == []

    def test_feed_after_finish_raises(self):
        demux = ResponseDemultiplexer()
        demux.finish()
        with pytest.raises(RuntimeError):
            demux.feed(b"{}")


class TestFragmentStream:
    """Async iteration, aggregation and resource handling."""

    @pytest.mark.asyncio
    async def test_progressive_and_aggregate_match(self, chunk_source):
        chunks = [MIXED_TRANSCRIPT[i:i + 5] for i in range(0, len(MIXED_TRANSCRIPT), 5)]

        relayed = []
        async for fragment in demultiplex(chunk_source(chunks)):
            relayed.append(fragment)

        aggregated = await aggregate(demultiplex(chunk_source(chunks)))
        assert "".join(relayed) == aggregated
        assert aggregated == "".join(_feed_all([MIXED_TRANSCRIPT]))

    @pytest.mark.asyncio
    async def test_aggregate_concatenates_with_separators(self, chunk_source):
        text = await aggregate(demultiplex(chunk_source([TWO_TURNS.encode()])))
        assert text == "A\n\nB"

    @pytest.mark.asyncio
    async def test_custom_separator(self, chunk_source):
        fragments = demultiplex(chunk_source([TWO_TURNS.encode()]), separator=" | ")
        assert await aggregate(fragments) == "A | B"

    @pytest.mark.asyncio
    async def test_fragments_are_pulled_lazily(self, chunk_source):
        source = chunk_source([b'{"content":"A"}', b'{"content":"B"}', b'{"content":"C"}'])
        fragments = demultiplex(source)
        assert await fragments.__anext__() == "A"
        assert source.pulled == 1
        assert await fragments.__anext__() == "B"
        assert source.pulled == 2
        await fragments.aclose()

    @pytest.mark.asyncio
    async def test_early_stop_closes_chunk_source(self, chunk_source):
        source = chunk_source([b'{"content":"A"}', b'{"content":"B"}', b'{"content":"C"}'])
        fragments = demultiplex(source)
        async for fragment in fragments:
            assert fragment == "A"
            break
        await fragments.aclose()
        assert source.closed is True
        assert source.pulled == 1

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, chunk_source):
        error = httpx.ReadError("connection reset")
        source = chunk_source([b'{"content":"A"}'], error=error)
        fragments = demultiplex(source)
        assert await fragments.__anext__() == "A"
        with pytest.raises(httpx.ReadError):
            await fragments.__anext__()
        assert source.closed is True

    @pytest.mark.asyncio
    async def test_aggregate_fails_on_transport_error(self, chunk_source):
        source = chunk_source([b'{"content":"A"}'], error=httpx.ReadError("boom"))
        with pytest.raises(httpx.ReadError):
            await aggregate(demultiplex(source))

    @pytest.mark.asyncio
    async def test_overflow_stops_reading_upstream(self, chunk_source):
        source = chunk_source(
            [b'{"content":"A"}', b'{"content":"' + b"x" * 64, b'{"content":"late"}']
        )
        received = []
        with pytest.raises(StreamTooLargeError):
            async for fragment in demultiplex(source, max_buffer_size=32):
                received.append(fragment)
        assert received == ["A"]
        assert source.pulled == 2
        assert source.closed is True

    @pytest.mark.asyncio
    async def test_stream_is_not_restartable(self, chunk_source):
        demux = ResponseDemultiplexer()
        assert await aggregate(demux.iter_fragments(chunk_source([b"x"]))) == "x"
        with pytest.raises(RuntimeError):
            await aggregate(demux.iter_fragments(chunk_source([b"y"])))

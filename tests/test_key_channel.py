import pytest

from KubeTabs.core.exceptions import InputChannelClosed
from KubeTabs.core.key_channel import KeyChannel
from KubeTabs.core.session import KeyPress


class TestKeyChannel:
    @pytest.mark.asyncio
    async def test_keys_are_read_in_order(self):
        channel = KeyChannel()
        channel.put(KeyPress("r", "r"))
        channel.put(KeyPress("enter"))
        assert await channel.read(1.0) == KeyPress("r", "r")
        assert await channel.read(1.0) == KeyPress("enter")

    @pytest.mark.asyncio
    async def test_read_times_out_with_none(self):
        channel = KeyChannel()
        assert await channel.read(0.01) is None

    @pytest.mark.asyncio
    async def test_close_wakes_reader(self):
        channel = KeyChannel()
        channel.close()
        assert channel.closed
        with pytest.raises(InputChannelClosed):
            await channel.read(1.0)
        with pytest.raises(InputChannelClosed):
            await channel.read(1.0)

    @pytest.mark.asyncio
    async def test_pending_keys_are_delivered_before_close(self):
        channel = KeyChannel()
        channel.put(KeyPress("q", "q"))
        channel.close()
        assert await channel.read(1.0) == KeyPress("q", "q")
        with pytest.raises(InputChannelClosed):
            await channel.read(1.0)

    @pytest.mark.asyncio
    async def test_put_after_close_is_dropped(self):
        channel = KeyChannel()
        channel.close()
        channel.close()
        channel.put(KeyPress("a", "a"))
        with pytest.raises(InputChannelClosed):
            await channel.read(1.0)

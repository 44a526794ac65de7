"""Tests for the remote list fetcher."""

import asyncio

import aiohttp
import pytest

from pslcache.errors import FetchError, TransportError
from pslcache.fetcher import fetch_rule_tree
from pslcache.rules import match


@pytest.mark.asyncio
async def test_fetch_builds_tree_from_chunked_body(psl_server, list_url):
    psl_server.body = "// header\ncom\n\nuk\nco.uk\n*.kawasaki.jp\n!city.kawasaki.jp"
    psl_server.chunk_size = 3

    tree = await fetch_rule_tree(list_url)

    assert psl_server.calls == [list_url]
    assert match(tree, "foo.co.uk") == "co.uk"
    assert match(tree, "city.kawasaki.jp") == "kawasaki.jp"
    assert match(tree, "example.org") == ""


@pytest.mark.asyncio
async def test_fetch_non_success_status_raises(psl_server, list_url):
    psl_server.status = 500
    psl_server.body = "500 Internal Error"

    with pytest.raises(TransportError) as excinfo:
        await fetch_rule_tree(list_url)

    assert excinfo.value.status_code == 500
    assert excinfo.value.url == list_url


@pytest.mark.asyncio
async def test_fetch_stream_error_raises(psl_server, list_url):
    psl_server.fail_stream()
    with pytest.raises(FetchError):
        await fetch_rule_tree(list_url)


@pytest.mark.asyncio
async def test_fetch_connection_error_raises(psl_server, list_url):
    psl_server.connect_error = aiohttp.ClientConnectionError("connection refused")
    with pytest.raises(TransportError):
        await fetch_rule_tree(list_url)


@pytest.mark.asyncio
async def test_fetch_timeout_raises(psl_server, list_url):
    psl_server.connect_error = asyncio.TimeoutError()
    with pytest.raises(TransportError) as excinfo:
        await fetch_rule_tree(list_url, timeout=1)
    assert "timed out" in str(excinfo.value)


@pytest.mark.asyncio
async def test_fetch_undecodable_body_raises(psl_server, list_url):
    psl_server.body = b"com\n\xff\xfe\n"
    with pytest.raises(TransportError):
        await fetch_rule_tree(list_url)

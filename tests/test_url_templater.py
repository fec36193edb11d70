#!/usr/bin/env python3
"""
Tests for cache key and request url building
"""

import pytest

from tile_cache.models.tile import TileCoordinate
from tile_cache.services.url_templater import UrlTemplater, internal_key

OSM_URL = "http://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"


class TestInternalKey:

    def test_keeps_sub_domain_placeholder(self):
        assert internal_key(TileCoordinate(x=1, y=2, z=3), OSM_URL) == \
            "http://{s}.tile.openstreetmap.org/3/1/2.png"

    def test_inverted_y_gets_plain_value(self):
        template = "https://tms.example.com/{z}/{x}/{-y}.png"
        assert internal_key(TileCoordinate(x=4, y=5, z=6), template) == \
            "https://tms.example.com/6/4/5.png"

    def test_repeated_tokens_are_all_replaced(self):
        template = "http://{s}.example.com/{z}/{x}/{y}?tile={z}-{x}-{y}"
        assert internal_key(TileCoordinate(x=7, y=8, z=9), template) == \
            "http://{s}.example.com/9/7/8?tile=9-7-8"

    def test_is_deterministic(self):
        coord = TileCoordinate(x=10, y=20, z=5)
        keys = {internal_key(coord, OSM_URL) for _ in range(20)}
        assert len(keys) == 1


class TestDispatchUrl:

    def test_uses_injected_chooser(self):
        chosen = []

        def choose(sub_domains):
            chosen.append(tuple(sub_domains))
            return sub_domains[-1]

        templater = UrlTemplater(OSM_URL, ["a", "b", "c"], choose)
        assert templater.dispatch_url(TileCoordinate(x=1, y=2, z=3)) == \
            "http://c.tile.openstreetmap.org/3/1/2.png"
        assert chosen == [("a", "b", "c")]

    @pytest.mark.parametrize("attempt", range(10))
    def test_random_sub_domain_is_one_of_configured(self, attempt):
        templater = UrlTemplater(OSM_URL, ["a", "b", "c"])
        coord = TileCoordinate(x=1, y=2, z=3)
        url = templater.dispatch_url(coord)
        key = templater.internal_key(coord)

        assert url in [key.replace("{s}", s) for s in ("a", "b", "c")]

    def test_template_without_placeholder_needs_no_sub_domains(self):
        templater = UrlTemplater("https://tiles.example.com/{z}/{x}/{y}.png", [])
        assert templater.dispatch_url(TileCoordinate(x=0, y=0, z=0)) == \
            "https://tiles.example.com/0/0/0.png"

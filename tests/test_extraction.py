"""Tests for carousel image extraction."""

import pytest

pytest_plugins = ('pytest_asyncio',)

from fakes import FakePage, carousel_html, image_urls, make_tab

from garment_scraper.variants.extraction import (
    SrcsetCandidate,
    extract_images,
    parse_images,
    parse_srcset,
    select_full_resolution,
)


class TestParseSrcset:
    """Tests for parse_srcset()."""

    def test_width_descriptors(self):
        """Test URLs and widths are split out of a srcset."""
        candidates = parse_srcset("https://cdn.example.com/a-w563.jpg 563w, https://cdn.example.com/a-e1.jpg 1920w")

        assert candidates == [
            SrcsetCandidate("https://cdn.example.com/a-w563.jpg", 563),
            SrcsetCandidate("https://cdn.example.com/a-e1.jpg", 1920),
        ]

    def test_commas_inside_urls(self):
        """Test a bare comma in a URL does not split the candidate."""
        candidates = parse_srcset("https://cdn.example.com/img?w=563,h=800 563w")

        assert candidates == [SrcsetCandidate("https://cdn.example.com/img?w=563,h=800", 563)]

    def test_bare_comma_between_candidates(self):
        """Test candidates separated by a comma without whitespace are both kept."""
        candidates = parse_srcset("https://cdn.example.com/a-w563.jpg 563w,https://cdn.example.com/a-e1.jpg 1920w")

        assert candidates == [
            SrcsetCandidate("https://cdn.example.com/a-w563.jpg", 563),
            SrcsetCandidate("https://cdn.example.com/a-e1.jpg", 1920),
        ]

    def test_trailing_comma_on_url_ends_candidate(self):
        """Test a URL immediately followed by a comma has no descriptor."""
        candidates = parse_srcset("https://cdn.example.com/a.jpg, https://cdn.example.com/b.jpg 2x")

        assert candidates == [
            SrcsetCandidate("https://cdn.example.com/a.jpg", None),
            SrcsetCandidate("https://cdn.example.com/b.jpg", None),
        ]

    def test_missing_descriptor(self):
        """Test a candidate without a width keeps width None."""
        assert parse_srcset("https://cdn.example.com/a.jpg") == [
            SrcsetCandidate("https://cdn.example.com/a.jpg", None)
        ]

    def test_empty(self):
        """Test empty and missing srcsets yield nothing."""
        assert parse_srcset("") == []
        assert parse_srcset(None) == []


class TestSelectFullResolution:
    """Tests for select_full_resolution()."""

    def test_suffix_match(self):
        """Test the full-resolution asset is found by its filename suffix."""
        candidates = [
            SrcsetCandidate("https://cdn.example.com/a-w563.jpg?ts=1", 563),
            SrcsetCandidate("https://cdn.example.com/a-e1.jpg?ts=1", 1920),
        ]

        assert select_full_resolution(candidates) == "https://cdn.example.com/a-e1.jpg?ts=1"

    def test_suffix_ignores_query_string(self):
        """Test the suffix is matched against the path, not the query."""
        candidates = [SrcsetCandidate("https://cdn.example.com/a.jpg?name=e1.jpg", 1920)]

        assert select_full_resolution(candidates) is None

    def test_no_match_yields_none(self):
        """Test a slot without the full-resolution asset contributes nothing."""
        candidates = [SrcsetCandidate("https://cdn.example.com/a-w563.jpg", 563)]

        assert select_full_resolution(candidates) is None

    def test_widest_when_no_suffix(self):
        """Test the widest candidate wins when no suffix convention is configured."""
        candidates = [
            SrcsetCandidate("https://cdn.example.com/small.jpg", 400),
            SrcsetCandidate("https://cdn.example.com/large.jpg", 2400),
            SrcsetCandidate("https://cdn.example.com/medium.jpg", 1200),
        ]

        assert select_full_resolution(candidates, suffix=None) == "https://cdn.example.com/large.jpg"

    def test_empty(self):
        assert select_full_resolution([]) is None
        assert select_full_resolution([], suffix=None) is None


class TestParseImages:
    """Tests for parse_images()."""

    def test_one_url_per_slot_in_order(self):
        """Test each carousel slot yields its desktop full-resolution URL."""
        assert parse_images(carousel_html("Black", 3)) == image_urls("Black", 3)

    def test_slots_without_full_resolution_skipped(self):
        """Test slots lacking the full-resolution asset are left out."""
        html = carousel_html("Black", 2) + (
            '<picture class="media-image">'
            '<source media="(min-width: 768px)" srcset="https://cdn.example.com/video-poster.jpg 800w">'
            "</picture>"
        )

        assert parse_images(html) == image_urls("Black", 2)

    def test_falls_back_to_img_srcset(self):
        """Test a slot without a desktop <source> uses any srcset it has."""
        html = (
            '<picture class="media-image">'
            '<img class="media-image__image" '
            'srcset="https://cdn.example.com/a-w563.jpg 563w, https://cdn.example.com/a-e1.jpg 1920w">'
            "</picture>"
        )

        assert parse_images(html) == ["https://cdn.example.com/a-e1.jpg"]

    def test_bare_comma_srcset_keeps_slot(self):
        """Test a desktop srcset without spaces after commas still yields its asset."""
        html = (
            '<picture class="media-image">'
            '<source media="(min-width: 768px)" srcset="'
            "https://static.example.com/p/1-w563.jpg?ts=1 563w,"
            'https://static.example.com/p/1-e1.jpg?ts=1 1920w">'
            "</picture>"
        )

        assert parse_images(html) == ["https://static.example.com/p/1-e1.jpg?ts=1"]

    def test_widest_mode(self):
        """Test extraction without a suffix picks the widest desktop candidate."""
        urls = parse_images(carousel_html("Navy", 1), full_res_suffix=None)

        assert urls == image_urls("Navy", 1)

    def test_empty_carousel(self):
        """Test a page without pictures yields no URLs."""
        assert parse_images("<html><body><p>Sold out</p></body></html>") == []


class TestExtractImages:
    """Tests for extract_images() on a tab."""

    @pytest.mark.asyncio
    async def test_reads_active_carousel(self):
        """Test extraction reads the tab's current content."""
        page = FakePage(carousel_html("Red", 2))

        urls = await extract_images(make_tab(page))

        assert urls == image_urls("Red", 2)

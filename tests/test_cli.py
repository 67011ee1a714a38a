"""Tests for the command-line interface."""

import json
import pytest
from unittest.mock import AsyncMock, patch

from garment_scraper import cli
from garment_scraper.exceptions import LaunchError
from garment_scraper.models import ImageRecord, ScrapeResult


def results(*failed):
    out = {}
    for url in ("https://shop.example.com/p/1", "https://shop.example.com/p/2"):
        out[url] = ScrapeResult(
            url=url,
            images=[ImageRecord(f"{url}/1-e1.jpg", "Black")],
            status=200,
            error="boom" if url in failed else None,
            error_type="NavigationError" if url in failed else None,
        )
    return out


@pytest.fixture
def orchestrator():
    """Patch the orchestrator and logging setup used by the CLI."""
    with patch.object(cli, "BatchOrchestrator") as orchestrator_cls, \
            patch.object(cli, "BrowserSessionManager") as manager_cls, \
            patch.object(cli, "setup_logging"):
        instance = orchestrator_cls.return_value
        instance.scrape_all = AsyncMock(return_value=results())
        instance.manager_cls = manager_cls
        instance.orchestrator_cls = orchestrator_cls
        yield instance


class TestBuildRequests:
    def test_shared_proxy(self):
        requests = cli.build_requests(["https://a", "https://b"], "user:pw@proxy.local:3128")

        assert [r.url for r in requests] == ["https://a", "https://b"]
        assert requests[0].proxy is requests[1].proxy
        assert requests[0].proxy.host == "proxy.local"

    def test_no_proxy(self):
        assert cli.build_requests(["https://a"])[0].proxy is None


class TestMain:
    """Tests for main()."""

    def test_json_output(self, orchestrator, capsys):
        """Test JSON results are printed to stdout and exit code is 0."""
        code = cli.main(["scrape", "https://shop.example.com/p/1", "https://shop.example.com/p/2", "-o", "json"])

        assert code == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["https://shop.example.com/p/1"]["colors"] == {
            "Black": ["https://shop.example.com/p/1/1-e1.jpg"]
        }

    def test_text_output(self, orchestrator, capsys):
        code = cli.main(["scrape", "https://shop.example.com/p/1"])

        assert code == cli.EXIT_OK
        assert "Black (1 images)" in capsys.readouterr().out

    def test_json_file_output(self, orchestrator, tmp_path):
        path = tmp_path / "results.json"

        cli.main(["scrape", "https://shop.example.com/p/1", "-o", "json", "-f", str(path)])

        assert "https://shop.example.com/p/2" in json.loads(path.read_text())

    def test_failed_product_exit_code(self, orchestrator):
        orchestrator.scrape_all.return_value = results("https://shop.example.com/p/2")

        assert cli.main(["scrape", "https://shop.example.com/p/1"]) == cli.EXIT_PRODUCT_FAILED

    def test_launch_error_exit_code(self, orchestrator, capsys):
        orchestrator.scrape_all.side_effect = LaunchError("Failed to launch chromium")

        assert cli.main(["scrape", "https://shop.example.com/p/1"]) == cli.EXIT_LAUNCH_FAILED
        assert "Could not start the browser" in capsys.readouterr().err

    def test_invalid_proxy(self, orchestrator, capsys):
        code = cli.main(["scrape", "https://shop.example.com/p/1", "--proxy", "not a proxy"])

        assert code == cli.EXIT_PRODUCT_FAILED
        orchestrator.scrape_all.assert_not_awaited()

    @pytest.mark.parametrize("flags", [
        ["--batch-size", "0"],
        ["--max-retries", "0"],
    ])
    def test_invalid_tunable_exit_code(self, orchestrator, capsys, flags):
        """Test an out-of-range override is reported instead of raising."""
        code = cli.main(["scrape", "https://shop.example.com/p/1", *flags])

        assert code == cli.EXIT_PRODUCT_FAILED
        assert "\u274c" in capsys.readouterr().err
        orchestrator.scrape_all.assert_not_awaited()

    def test_invalid_browser_type_exit_code(self, orchestrator, capsys):
        """Test a bad SCRAPER_BROWSER_TYPE is reported instead of raising."""
        with patch.object(cli.settings, "BROWSER_TYPE", "netscape"):
            code = cli.main(["scrape", "https://shop.example.com/p/1"])

        assert code == cli.EXIT_PRODUCT_FAILED
        assert "browser_type" in capsys.readouterr().err
        orchestrator.orchestrator_cls.assert_not_called()

    def test_duplicate_urls_exit_code(self, orchestrator, capsys):
        code = cli.main(["scrape", "https://shop.example.com/p/1", "https://shop.example.com/p/1"])

        assert code == cli.EXIT_PRODUCT_FAILED
        assert "Duplicate product URLs" in capsys.readouterr().err
        orchestrator.scrape_all.assert_not_awaited()

    def test_overrides_applied(self, orchestrator):
        """Test command-line tunables reach the scraper config and browser."""
        cli.main([
            "scrape", "https://shop.example.com/p/1",
            "--batch-size", "5", "--max-retries", "2", "--headed",
        ])

        config = orchestrator.orchestrator_cls.call_args.args[1]
        assert config.batch_size == 5
        assert config.max_retries == 2
        browser_config = orchestrator.manager_cls.call_args.args[0]
        assert browser_config.headless is False
        assert "--disable-blink-features=AutomationControlled" in browser_config.launch_args

    def test_no_command_prints_help(self, capsys):
        with patch.object(cli, "setup_logging"):
            assert cli.main([]) == cli.EXIT_OK

        assert "scrape" in capsys.readouterr().out

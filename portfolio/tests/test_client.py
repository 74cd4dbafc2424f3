import unittest
from unittest.mock import MagicMock

import requests

from portfolio.cache import build_portfolio_cache
from portfolio.client import NETWORK_ERRORS, PortfolioApiClient, PortfolioApiError
from portfolio.config import Settings


def _response(status_code, body):
    response = MagicMock(status_code=status_code, reason="Reason")
    response.json.return_value = body
    return response


class PortfolioApiClientTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.client = PortfolioApiClient(
            "https://api.example.test/api/", session=self.session, timeout=3
        )

    def test_list_projects(self):
        self.session.get.return_value = _response(
            200,
            {
                "projects": [
                    {
                        "id": "p1",
                        "title": "Site",
                        "fullDescription": "Long",
                        "createdAt": "2024-01-01T00:00:00.000Z",
                        "published": True,
                    }
                ]
            },
        )
        (project,) = self.client.list_projects()
        self.session.get.assert_called_once_with(
            "https://api.example.test/api/projects", timeout=3
        )
        self.assertEqual(project.id, "p1")
        self.assertEqual(project.full_description, "Long")
        self.assertTrue(project.published)
        self.assertEqual(project.created_at.year, 2024)

    def test_get_project_quotes_id(self):
        self.session.get.return_value = _response(200, {"project": {"id": "a b"}})
        self.assertEqual(self.client.get_project("a b").id, "a b")
        self.session.get.assert_called_once_with(
            "https://api.example.test/api/projects/a%20b", timeout=3
        )

    def test_get_profile(self):
        self.session.get.return_value = _response(
            200, {"profile": {"name": "Ada", "skills": ["Python"]}}
        )
        profile = self.client.get_profile()
        self.assertEqual(profile.name, "Ada")
        self.assertEqual(profile.skills, ["Python"])

    def test_error_envelope(self):
        self.session.get.return_value = _response(
            404, {"error": "Profile not found", "code": "NOT_FOUND"}
        )
        with self.assertRaises(PortfolioApiError) as ctx:
            self.client.get_profile()
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.code, "NOT_FOUND")
        self.assertEqual(ctx.exception.message, "Profile not found")

    def test_non_json_error(self):
        response = _response(502, None)
        response.json.side_effect = ValueError("not json")
        self.session.get.return_value = response
        with self.assertRaises(PortfolioApiError) as ctx:
            self.client.list_projects()
        self.assertEqual(ctx.exception.code, "HTTP_ERROR")

    def test_network_errors_propagate(self):
        self.session.get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(NETWORK_ERRORS):
            self.client.list_projects()


class BuildPortfolioCacheTests(unittest.TestCase):
    def test_uses_settings_intervals(self):
        client = MagicMock()
        client.list_projects.return_value = ["p"]
        settings = Settings(cache_refresh_interval_seconds=10, cache_dedupe_interval_seconds=2)
        cache = build_portfolio_cache(client, settings, scheduler=None)
        self.addCleanup(cache.close)
        self.assertEqual(cache.refresh_interval, 10)
        self.assertEqual(cache.dedupe_interval, 2)
        self.assertEqual(cache.get("projects").value, ["p"])
        client.get_profile.assert_not_called()


if __name__ == "__main__":
    unittest.main()

import unittest

from portfolio.db import InMemoryDocumentStore
from portfolio.errors import ValidationFailedError
from portfolio.seed import seed_portfolio
from shared.firebase_constants import (
    PROFILE_COLLECTION,
    PROFILE_DOCUMENT_ID,
    PROJECTS_COLLECTION,
)

PROFILE = {
    "name": "Ada",
    "title": "Engineer",
    "bio": "Builds things",
    "email": "ada@example.com",
}

PROJECT = {
    "title": "Site",
    "description": "Short",
    "fullDescription": "Long",
    "thumbnail": "https://example.test/t.png",
    "technologies": ["Python"],
    "category": "web",
    "published": True,
}


class SeedTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()

    def test_seed_profile_and_projects(self):
        summary = seed_portfolio(self.store, {"profile": PROFILE, "projects": [PROJECT, PROJECT]})
        self.assertTrue(summary["profile"])
        self.assertEqual(len(summary["projects"]), 2)

        profile = self.store.get(PROFILE_COLLECTION, PROFILE_DOCUMENT_ID).data
        self.assertEqual(profile["skills"], [])
        self.assertEqual(profile["experience"], [])
        self.assertIn("updatedAt", profile)

        project = self.store.get(PROJECTS_COLLECTION, summary["projects"][0]).data
        self.assertEqual(project["createdAt"], project["updatedAt"])
        self.assertIsNone(project["liveUrl"])

    def test_invalid_project_writes_nothing(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            seed_portfolio(self.store, {"projects": [PROJECT, {**PROJECT, "title": ""}]})
        self.assertEqual(ctx.exception.message, "Invalid project at index 1")
        self.assertNotIn(PROJECTS_COLLECTION, self.store.collections)

    def test_invalid_profile(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            seed_portfolio(self.store, {"profile": {**PROFILE, "email": "nope"}})
        self.assertIn("email", ctx.exception.fields)

    def test_empty_data(self):
        self.assertEqual(seed_portfolio(self.store, {}), {"profile": False, "projects": []})


if __name__ == "__main__":
    unittest.main()

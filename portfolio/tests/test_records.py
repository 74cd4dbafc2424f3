import unittest
from datetime import datetime, timezone

from portfolio.records import (
    decode_profile,
    decode_project,
    format_timestamp,
    normalize_profile_fields,
    normalize_project_fields,
    project_to_wire,
    to_datetime,
)
from shared.json_utils import convert_keys


class DecodeTests(unittest.TestCase):
    def test_project_defaults_for_malformed_document(self):
        project = decode_project(
            "p1",
            {
                "title": 7,
                "images": "not-a-list",
                "technologies": ["Python", 3, "Go"],
                "featured": "true",
                "published": 1,
                "order": 2.0,
                "liveUrl": "   ",
                "githubUrl": "https://github.com/x/y",
            },
        )
        self.assertEqual(project.id, "p1")
        self.assertEqual(project.title, "")
        self.assertEqual(project.images, [])
        self.assertEqual(project.technologies, ["Python", "Go"])
        self.assertFalse(project.featured)
        self.assertFalse(project.published)
        self.assertEqual(project.order, 2)
        self.assertIsNone(project.live_url)
        self.assertEqual(project.github_url, "https://github.com/x/y")
        self.assertIsNone(project.created_at)

    def test_document_id_wins_over_stored_id(self):
        self.assertEqual(decode_project("real", {"id": "stored"}).id, "real")

    def test_profile_experience(self):
        profile = decode_profile(
            {
                "name": "Ada",
                "resumeUrl": "",
                "skills": None,
                "experience": [
                    {"company": "Acme", "endDate": "present", "responsibilities": ["x"]},
                    "junk",
                ],
                "updatedAt": "2024-02-03T04:05:06Z",
            }
        )
        self.assertIsNone(profile.resume_url)
        self.assertEqual(profile.skills, [])
        self.assertEqual(len(profile.experience), 1)
        self.assertEqual(profile.experience[0].end_date, "present")
        self.assertEqual(profile.experience[0].position, "")
        self.assertEqual(
            profile.updated_at, datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
        )

    def test_empty_document(self):
        self.assertEqual(decode_profile(None).name, "")


class TimestampTests(unittest.TestCase):
    def test_to_datetime(self):
        expected = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(to_datetime(expected.replace(tzinfo=None)), expected)
        self.assertEqual(to_datetime(expected.timestamp()), expected)
        self.assertEqual(to_datetime("2024-01-01T00:00:00Z"), expected)
        self.assertIsNone(to_datetime("yesterday"))
        self.assertIsNone(to_datetime(True))

    def test_format_timestamp(self):
        value = datetime(2024, 1, 1, 8, 0, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(format_timestamp(value), "2024-01-01T08:00:00.123Z")
        self.assertIsNone(format_timestamp(None))

    def test_wire_uses_camel_case(self):
        project = decode_project(
            "p1", {"fullDescription": "x", "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)}
        )
        wire = project_to_wire(project)
        self.assertEqual(wire["fullDescription"], "x")
        self.assertEqual(wire["createdAt"], "2024-01-01T00:00:00.000Z")
        self.assertNotIn("full_description", wire)


class NormalizeTests(unittest.TestCase):
    def test_full_project(self):
        fields = normalize_project_fields(
            {
                "title": "  T  ",
                "description": "d",
                "fullDescription": "f",
                "thumbnail": "t",
                "category": "c",
                "technologies": [" Python", "Python", "", "Go"],
                "liveUrl": "  ",
                "id": "ignored",
                "createdAt": "ignored",
            },
            partial=False,
        )
        self.assertEqual(fields["title"], "T")
        self.assertEqual(fields["technologies"], ["Python", "Go"])
        self.assertEqual(fields["images"], [])
        self.assertIsNone(fields["liveUrl"])
        self.assertIsNone(fields["githubUrl"])
        self.assertFalse(fields["featured"])
        self.assertFalse(fields["published"])
        self.assertEqual(fields["order"], 0)
        self.assertNotIn("id", fields)
        self.assertNotIn("createdAt", fields)

    def test_partial_project(self):
        self.assertEqual(
            normalize_project_fields({"published": True, "order": 3}, partial=True),
            {"published": True, "order": 3},
        )

    def test_profile_experience_is_completed(self):
        fields = normalize_profile_fields({"experience": [{"company": "Acme"}]})
        self.assertEqual(
            fields["experience"],
            [
                {
                    "company": "Acme",
                    "position": "",
                    "location": "",
                    "startDate": "",
                    "endDate": "",
                    "responsibilities": [],
                }
            ],
        )


class ConvertKeysTests(unittest.TestCase):
    def test_nested_conversion(self):
        data = {"resumeUrl": "x", "experience": [{"startDate": "2020-01"}]}
        snake = convert_keys(data, "camel_to_snake")
        self.assertEqual(snake, {"resume_url": "x", "experience": [{"start_date": "2020-01"}]})
        self.assertEqual(convert_keys(snake, "snake_to_camel"), data)


if __name__ == "__main__":
    unittest.main()

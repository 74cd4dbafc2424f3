import unittest

from portfolio.validation import (
    is_valid_email,
    validate_contact_form,
    validate_profile_record,
    validate_project_record,
)

VALID_FORM = {
    "name": "Ada",
    "email": "ada@example.com",
    "subject": "Hello",
    "message": "Long enough message",
}

VALID_PROJECT = {
    "title": "Title",
    "description": "Description",
    "fullDescription": "Full description",
    "thumbnail": "https://example.test/t.png",
    "technologies": [],
    "category": "web",
}


class ContactFormTests(unittest.TestCase):
    def test_valid_form(self):
        self.assertEqual(validate_contact_form(VALID_FORM), {})

    def test_empty_form_reports_every_field(self):
        self.assertEqual(
            validate_contact_form({}),
            {
                "name": "Please enter your name",
                "email": "Please enter your email address",
                "subject": "Please enter a subject",
                "message": "Please enter a message",
            },
        )

    def test_non_object_is_treated_as_empty(self):
        for payload in (None, [], "text", 42):
            self.assertEqual(len(validate_contact_form(payload)), 4)

    def test_whitespace_only_is_empty(self):
        errors = validate_contact_form({**VALID_FORM, "name": "   ", "subject": "\t"})
        self.assertEqual(set(errors), {"name", "subject"})

    def test_message_length_counts_trimmed_text(self):
        errors = validate_contact_form({**VALID_FORM, "message": "   123456789   "})
        self.assertEqual(errors, {"message": "Message must be at least 10 characters"})
        self.assertEqual(validate_contact_form({**VALID_FORM, "message": "1234567890"}), {})

    def test_email_shape(self):
        for email in ("a@b.c", " a@b.co "):
            self.assertEqual(validate_contact_form({**VALID_FORM, "email": email}), {})
        for email in ("a@b", "a b@c.d", "@b.c", "a@.c@d"):
            errors = validate_contact_form({**VALID_FORM, "email": email})
            self.assertEqual(errors, {"email": "Please enter a valid email address"}, email)

    def test_non_string_fields(self):
        errors = validate_contact_form({**VALID_FORM, "name": 5, "email": ["x"]})
        self.assertEqual(set(errors), {"name", "email"})

    def test_is_valid_email(self):
        self.assertTrue(is_valid_email("x@y.io"))
        self.assertFalse(is_valid_email(None))
        self.assertFalse(is_valid_email("x@y"))


class ProjectRecordTests(unittest.TestCase):
    def test_valid_project(self):
        self.assertEqual(validate_project_record(VALID_PROJECT), {})

    def test_missing_required_fields(self):
        errors = validate_project_record({})
        self.assertEqual(
            set(errors),
            {"title", "description", "fullDescription", "thumbnail", "category", "technologies"},
        )

    def test_partial_checks_only_supplied_fields(self):
        self.assertEqual(validate_project_record({"published": True}, partial=True), {})
        errors = validate_project_record({"title": ""}, partial=True)
        self.assertEqual(errors, {"title": "Title is required"})

    def test_field_types(self):
        errors = validate_project_record(
            {
                **VALID_PROJECT,
                "images": "a.png",
                "liveUrl": 3,
                "featured": "yes",
                "order": True,
            }
        )
        self.assertEqual(set(errors), {"images", "liveUrl", "featured", "order"})

    def test_non_object_payload(self):
        self.assertIn("_", validate_project_record([1, 2]))


class ProfileRecordTests(unittest.TestCase):
    def test_partial_profile(self):
        self.assertEqual(validate_profile_record({"bio": "New"}), {})
        self.assertEqual(validate_profile_record({"name": " "}), {"name": "Name is required"})

    def test_profile_email_is_trimmed(self):
        self.assertEqual(validate_profile_record({"email": " a@b.co "}), {})
        self.assertEqual(
            validate_profile_record({"email": 5}),
            {"email": "Please enter a valid email address"},
        )

    def test_full_profile_requires_identity_fields(self):
        errors = validate_profile_record({}, partial=False)
        self.assertEqual(set(errors), {"name", "title", "bio", "email"})

    def test_collections(self):
        errors = validate_profile_record({"skills": "Python", "experience": [{"company": "A"}, 3]})
        self.assertEqual(set(errors), {"skills", "experience"})


if __name__ == "__main__":
    unittest.main()

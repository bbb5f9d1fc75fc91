import unittest

from sitegen.generators.config_normalizer import ConfigNormalizer, IntakeValidationError


class TestConfigNormalizer(unittest.TestCase):

    def setUp(self):
        self.normalizer = ConfigNormalizer()

    def test_missing_required_fields(self):
        with self.assertRaises(IntakeValidationError) as ctx:
            self.normalizer.normalize({"services": ["Audits"]})
        self.assertEqual(ctx.exception.missing, ["businessName", "industry"])
        self.assertIn("businessName", str(ctx.exception))

    def test_blank_values_count_as_missing(self):
        with self.assertRaises(IntakeValidationError) as ctx:
            self.normalizer.normalize({"businessName": "  ", "industry": "Legal"})
        self.assertEqual(ctx.exception.missing, ["businessName"])

    def test_non_dict_intake(self):
        with self.assertRaises(IntakeValidationError):
            self.normalizer.normalize(["not", "a", "form"])

    def test_full_intake(self):
        project = self.normalizer.normalize({
            "businessName": "Harbor & Stone Law",
            "industry": "Legal Services",
            "services": [
                {"name": "Estate Planning", "description": "Wills and trusts"},
                "Business Formation",
                "estate planning",
            ],
            "location": {"city": "Portland", "state": "OR", "country": "US"},
            "toneOfVoice": "warm",
            "brand": {"primary": "#1E3A5F", "accentColor": "not-a-color"},
            "targetAudiences": "families, small businesses",
            "competitorUrl": "https://competitor.example",
            "email": "hello@harborstone.example",
        })

        self.assertEqual(project.project_name, "Harbor & Stone Law")
        self.assertEqual(project.project_slug, "harbor-stone-law")
        self.assertEqual([s.name for s in project.services], ["Estate Planning", "Business Formation"])
        self.assertEqual(project.services[0].description, "Wills and trusts")
        self.assertEqual(project.location.label(), "Portland, OR")
        self.assertEqual(project.tone_of_voice, "warm")
        self.assertEqual(project.brand.primary_color, "#1e3a5f")
        self.assertIsNone(project.brand.accent_color)
        self.assertEqual(project.target_audiences, ["families", "small businesses"])
        self.assertEqual(project.competitor_url, "https://competitor.example")
        self.assertEqual(project.contact_email, "hello@harborstone.example")

    def test_defaults(self):
        project = self.normalizer.normalize({"businessName": "Acme", "industry": "Consulting"})
        self.assertEqual(project.services, [])
        self.assertEqual(project.tone_of_voice, "professional")
        self.assertEqual(project.target_audiences, ["general public"])
        self.assertEqual(project.location.label(), "")
        self.assertIsNone(project.competitor_url)

    def test_services_and_location_as_strings(self):
        project = self.normalizer.normalize({
            "businessName": "Acme",
            "industry": "Consulting",
            "services": "Strategy, Operations, ",
            "location": "Austin, TX",
        })
        self.assertEqual([s.name for s in project.services], ["Strategy", "Operations"])
        self.assertEqual(project.location.city, "Austin")
        self.assertEqual(project.location.region, "TX")

    def test_fingerprint_is_stable(self):
        intake = {"businessName": "Acme", "industry": "Consulting", "services": ["Strategy"]}
        first = self.normalizer.normalize(intake)
        second = self.normalizer.normalize(dict(intake))
        self.assertEqual(first.fingerprint(), second.fingerprint())
        other = self.normalizer.normalize(dict(intake, industry="Legal"))
        self.assertNotEqual(first.fingerprint(), other.fingerprint())


if __name__ == '__main__':
    unittest.main()

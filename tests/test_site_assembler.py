import os
import shutil
import tempfile
import unittest

from bs4 import BeautifulSoup

from sitegen.domain import ProjectConfig, Service, Location, ArchetypeProfile
from sitegen.generators import SiteAssembler
from sitegen.generators.site_assembler import render_robots, render_sitemap

from tests.fakes import deterministic_site


class TestSiteAssembler(unittest.TestCase):

    def setUp(self):
        self.output_dir = tempfile.mkdtemp()
        self.project = ProjectConfig(
            project_name="Harbor Law",
            project_slug="harbor-law",
            industry="Legal Services",
            services=[Service("Estate Planning"), Service("Probate")],
            location=Location(city="Portland", region="OR"),
            contact_email="hello@harbor.example",
        )
        self.archetype = ArchetypeProfile(industry="Legal Services", detected_industry="Legal Services",
                                          confidence=0.7, archetype="legal")
        self.plan, self.tokens, self.layouts, self.content = deterministic_site(
            self.project, self.archetype, base_url="https://harbor.example")
        self.assembler = SiteAssembler(base_url="https://harbor.example")

    def tearDown(self):
        shutil.rmtree(self.output_dir)

    def assemble(self, only=None):
        return self.assembler.assemble(self.project, self.plan, self.tokens, self.layouts,
                                       self.content, self.output_dir, only)

    def read(self, filename):
        with open(os.path.join(self.output_dir, filename), encoding="utf-8") as f:
            return BeautifulSoup(f.read(), "html.parser")

    def test_writes_every_page_and_assets(self):
        written = self.assemble()
        for page in self.plan.pages:
            self.assertIn(page.filename, written)
            self.assertTrue(os.path.isfile(os.path.join(self.output_dir, page.filename)))
        self.assertIn("styles.css", written)
        self.assertTrue(os.path.isfile(os.path.join(self.output_dir, "script.js")))
        self.assertEqual(self.assembler.missing_pages(self.plan, self.output_dir), [])

    def test_placeholder_images(self):
        self.assemble()
        hero = next(img for img in self.content.images if img.plan_id == "home-hero")
        self.assertEqual(hero.local_path, "images/home-hero.svg")
        self.assertTrue(os.path.isfile(os.path.join(self.output_dir, "images", "home-hero.svg")))
        soup = self.read("index.html")
        self.assertTrue(all(img.get("alt") for img in soup.find_all("img")))

    def test_navigation_markup(self):
        self.assemble()
        soup = self.read("about.html")
        links = [a["href"] for a in soup.select("nav.nav-menu a")]
        self.assertEqual(links, ["index.html", "about.html", "services.html", "contact.html"])
        self.assertEqual(soup.select_one('nav.nav-menu a[aria-current="page"]')["href"], "about.html")
        self.assertEqual([a["href"] for a in soup.select("nav.footer-nav a")],
                         ["privacy.html", "terms.html", "faq.html"])

    def test_head_metadata(self):
        self.assemble()
        soup = self.read("index.html")
        self.assertEqual(soup.title.get_text(), "Home | Harbor Law")
        self.assertEqual(soup.find("link", rel="canonical")["href"], "https://harbor.example/")
        self.assertIsNotNone(soup.find("meta", attrs={"property": "og:title"}))
        self.assertIsNotNone(soup.find("script", attrs={"type": "application/ld+json"}))
        self.assertEqual(soup.find("h1").get_text(), "Harbor Law")

    def test_sections_follow_layout_order(self):
        self.assemble()
        soup = self.read("index.html")
        ids = [s["id"] for s in soup.select("main > section")]
        self.assertEqual(ids, self.layouts["home"].selected_variant.section_order)

    def test_contact_form_labels(self):
        self.assemble()
        soup = self.read("contact.html")
        for field in soup.select("form.contact-form input, form.contact-form textarea"):
            self.assertIsNotNone(soup.find("label", attrs={"for": field["id"]}))

    def test_styles_carry_tokens_and_breakpoints(self):
        self.assemble()
        with open(os.path.join(self.output_dir, "styles.css"), encoding="utf-8") as f:
            css = f.read()
        self.assertIn(f"--color-primary-500: {self.tokens.colors.primary['500']};", css)
        self.assertIn("@media (max-width: 768px)", css)
        self.assertIn("@media (min-width: 1025px)", css)
        self.assertIn(".page-home .section-services .grid { grid-template-columns: repeat(3, 1fr); }", css)

    def test_only_rewrites_selected_pages(self):
        self.assemble()
        os.remove(os.path.join(self.output_dir, "terms.html"))
        self.assertEqual(self.assembler.missing_pages(self.plan, self.output_dir), ["terms"])
        written = self.assemble(only=["terms"])
        self.assertIn("terms.html", written)
        self.assertNotIn("index.html", written)
        self.assertEqual(self.assembler.missing_pages(self.plan, self.output_dir), [])

    def test_sitemap_and_robots(self):
        self.assembler.write_seo_files(self.plan.pages, self.output_dir)
        with open(os.path.join(self.output_dir, "robots.txt"), encoding="utf-8") as f:
            robots = f.read()
        self.assertIn("Disallow: /admin", robots)
        self.assertIn("Sitemap: https://harbor.example/sitemap.xml", robots)

        sitemap = render_sitemap(self.plan.pages, "https://harbor.example/", lastmod="2024-01-01")
        self.assertIn("<loc>https://harbor.example/</loc>", sitemap)
        self.assertIn("<loc>https://harbor.example/terms.html</loc>", sitemap)
        self.assertEqual(sitemap.count("<url>"), len(self.plan.pages))
        self.assertEqual(render_robots("https://a.example/").splitlines()[-1], "Sitemap: https://a.example/sitemap.xml")


if __name__ == '__main__':
    unittest.main()

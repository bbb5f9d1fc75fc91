"""
SiteGen Prompt Library
======================
One template per collaborator-backed stage.

Categories:
1. Industry Classification
2. Layout Variant Selection
3. Section Copywriting
4. SEO Metadata
5. Image Prompts
"""

# =============================================================================
# 1. INDUSTRY CLASSIFICATION
# =============================================================================

PROMPT_INDUSTRY_CLASSIFICATION = """
Classify the business below into exactly one website archetype.

Business: {project_name}
Industry: {industry}
Services: {services}
Target audiences: {audiences}

Allowed archetypes: {archetypes}

Return JSON:
{{
  "detectedIndustry": "short industry label",
  "archetype": "one of the allowed archetypes",
  "confidence": 0.0-1.0,
  "primaryKeywords": ["5-8 search keywords"],
  "tone": "tone of voice for the copy",
  "heroStyle": "short description of hero imagery",
  "mood": "one word"
}}
"""

# =============================================================================
# 2. LAYOUT VARIANT SELECTION
# =============================================================================

PROMPT_LAYOUT_VARIANT = """
Choose the best section order for the "{page_title}" page ({page_type}) of a {archetype} website
for {project_name}.

Available sections (use only these ids): {section_ids}

Return JSON:
{{
  "name": "short variant name",
  "description": "one sentence",
  "sectionOrder": ["section ids in display order"],
  "style": "modern | classic | minimal | bold",
  "complexity": "simple | moderate | rich"
}}
"""

# =============================================================================
# 3. SECTION COPYWRITING
# =============================================================================

PROMPT_SECTION_COPY = """
Write website copy for the "{section_type}" section of the "{page_title}" page.

Business: {project_name}
Industry: {industry}
Location: {location}
Services: {services}
Tone: {tone}

Return JSON:
{{
  "headline": "max 8 words",
  "subheadline": "max 16 words",
  "description": "2-3 sentences",
  "bullets": ["3-5 short benefit statements"],
  "ctaText": "2-4 words"
}}
"""

# =============================================================================
# 4. SEO METADATA
# =============================================================================

PROMPT_PAGE_SEO = """
Write SEO metadata for the "{page_title}" page of {project_name} ({industry}, {location}).
Primary keywords: {keywords}

Return JSON:
{{
  "title": "max 60 characters",
  "metaDescription": "max 160 characters",
  "h1": "main heading",
  "keywords": ["5-8 keywords"]
}}
"""

# =============================================================================
# 5. IMAGE PROMPTS
# =============================================================================

PROMPT_IMAGE = (
    "Professional {industry} {section_type} image for {project_name}, modern design, "
    "{mood} mood, color scheme {primary} and {accent}, photorealistic, no text"
)

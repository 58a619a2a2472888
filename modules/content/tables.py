"""The content tables served under /api/content/<table>."""

from .engine import ARRAY, FLAG, NUMBER, ContentEngine, Rule, TableSpec
from .models import BlogPost, Education, Experience, Project, SkillGroup

TABLES = {
    "experience": TableSpec(
        "experience", Experience,
        columns=["company", "role", "period", "description", "badge", "order_num", "hidden"],
        rules={
            "company": Rule(required=True, max_length=100, label="Company"),
            "role": Rule(required=True, max_length=100, label="Role"),
            "period": Rule(required=True, max_length=50, label="Period"),
            "description": Rule(max_length=2000),
            "badge": Rule(max_length=20),
            "order_num": Rule(NUMBER),
            "hidden": Rule(FLAG),
        },
    ),
    "education": TableSpec(
        "education", Education,
        columns=["institution", "degree", "period", "description", "badge", "order_num", "hidden"],
        rules={
            "institution": Rule(required=True, max_length=100, label="Institution"),
            "degree": Rule(required=True, max_length=100, label="Degree"),
            "period": Rule(required=True, max_length=50, label="Period"),
            "description": Rule(max_length=2000),
            "badge": Rule(max_length=20),
            "order_num": Rule(NUMBER),
            "hidden": Rule(FLAG),
        },
    ),
    "projects": TableSpec(
        "projects", Project,
        columns=["title", "description", "tags", "image_url", "project_url", "github_url",
                 "featured", "order_num", "hidden"],
        rules={
            "title": Rule(required=True, max_length=200, label="Title"),
            "description": Rule(max_length=2000),
            "tags": Rule(ARRAY),
            "image_url": Rule(max_length=500),
            "project_url": Rule(max_length=500),
            "github_url": Rule(max_length=500),
            "featured": Rule(FLAG),
            "order_num": Rule(NUMBER),
            "hidden": Rule(FLAG),
        },
        array_fields=["tags"],
        featured=True,
    ),
    "blog": TableSpec(
        "blog", BlogPost,
        columns=["title", "content", "excerpt", "tags", "image_url", "read_time",
                 "featured", "published", "order_num", "hidden"],
        rules={
            "title": Rule(required=True, max_length=200, label="Title"),
            "content": Rule(required=True, max_length=50000, label="Content"),
            "excerpt": Rule(max_length=500),
            "tags": Rule(ARRAY),
            "image_url": Rule(max_length=500),
            "read_time": Rule(NUMBER),
            "featured": Rule(FLAG),
            "published": Rule(FLAG),
            "order_num": Rule(NUMBER),
            "hidden": Rule(FLAG),
        },
        array_fields=["tags"],
        featured=True,
        published_only=True,
    ),
    "skills": TableSpec(
        "skills", SkillGroup,
        columns=["category", "skills", "hidden"],
        rules={
            "category": Rule(required=True, max_length=100, label="Category"),
            "skills": Rule(ARRAY),
            "hidden": Rule(FLAG),
        },
        array_fields=["skills"],
        ordered=False,
    ),
}

ENGINES = {name: ContentEngine(spec) for name, spec in TABLES.items()}

# Tables with featured/category reads
TAGGED_TABLES = tuple(name for name, spec in TABLES.items() if spec.featured)


def engine_for(table: str) -> ContentEngine:
    return ENGINES[table]

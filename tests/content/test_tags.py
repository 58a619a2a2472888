from urllib.parse import quote

from modules.content.tables import engine_for


def test_tags_round_trip(admin_client) -> None:
    item_id = admin_client.post("/api/content/projects",
                                json={"title": "P", "tags": ["python", "flask"]}).get_json()["id"]
    item = admin_client.get(f"/api/content/projects/{item_id}").get_json()
    assert item["tags"] == ["python", "flask"]


def test_category_is_an_exact_tag_match(client) -> None:
    projects = engine_for("projects")
    exact = projects.create({"title": "Exact", "tags": ["py"]})
    projects.create({"title": "Longer", "tags": ["python"]})
    projects.create({"title": "Hidden", "tags": ["py"], "hidden": 1})

    items = client.get("/api/content/projects/category/py").get_json()
    assert [item["id"] for item in items] == [exact]


def test_category_with_like_wildcards(client) -> None:
    projects = engine_for("projects")
    projects.create({"title": "Plain", "tags": ["ab"]})
    literal = projects.create({"title": "Percent", "tags": ["100%"]})

    assert client.get("/api/content/projects/category/a%25").get_json() == []
    items = client.get("/api/content/projects/category/100%25").get_json()
    assert [item["id"] for item in items] == [literal]


def test_categories_counts(client) -> None:
    projects = engine_for("projects")
    projects.create({"title": "A", "tags": ["python", "sql"]})
    projects.create({"title": "B", "tags": ["python"]})
    projects.create({"title": "C", "tags": []})
    projects.create({"title": "D", "tags": ["secret"], "hidden": 1})

    assert client.get("/api/content/projects/categories").get_json() == [
        {"name": "python", "count": 2},
        {"name": "sql", "count": 1},
    ]


def test_blog_tag_reads_skip_drafts(client) -> None:
    blog = engine_for("blog")
    live = blog.create({"title": "Live", "content": "c", "tags": ["notes"], "published": 1})
    blog.create({"title": "Draft", "content": "c", "tags": ["notes", "wip"], "published": 0})

    assert client.get("/api/content/blog/categories").get_json() == [{"name": "notes", "count": 1}]
    assert [i["id"] for i in client.get("/api/content/blog/category/notes").get_json()] == [live]


def test_blog_tag_reads_admin_sees_drafts(admin_client) -> None:
    blog = engine_for("blog")
    blog.create({"title": "Draft", "content": "c", "tags": ["wip"], "published": 0})
    items = admin_client.get("/api/content/blog/category/wip").get_json()
    assert [i["title"] for i in items] == ["Draft"]


def test_untagged_tables_have_no_tag_routes(client) -> None:
    assert client.get("/api/content/experience/categories").status_code == 404
    assert client.get("/api/content/experience/featured").status_code == 404


def test_category_with_non_ascii_tag(client) -> None:
    projects = engine_for("projects")
    cafe = projects.create({"title": "Cafe", "tags": ["café", "naïve"]})
    projects.create({"title": "Plain", "tags": ["cafe"]})

    items = client.get("/api/content/projects/category/café").get_json()
    assert [item["id"] for item in items] == [cafe]
    assert {"name": "café", "count": 1} in client.get("/api/content/projects/categories").get_json()


def test_category_with_quote_and_backslash(client) -> None:
    projects = engine_for("projects")
    quoted = projects.create({"title": "Quoted", "tags": ['say "hi"', "C:\\temp"]})

    items = client.get("/api/content/projects/category/" + quote('say "hi"')).get_json()
    assert [item["id"] for item in items] == [quoted]
    items = client.get("/api/content/projects/category/" + quote("C:\\temp")).get_json()
    assert [item["id"] for item in items] == [quoted]

# ui_routes.py — site-level routes that are not part of the JSON API
from datetime import datetime

from flask import Blueprint, current_app, make_response, request
from markupsafe import escape

from modules.content.models import BlogPost

ui = Blueprint("ui", __name__)

STATIC_PAGES = [
    ("/", "1.0"),
    ("/projects-list", "0.8"),
    ("/blogs", "0.8"),
]


def _url(loc, lastmod, changefreq, priority):
    return (f"  <url><loc>{escape(loc)}</loc><lastmod>{lastmod}</lastmod>"
            f"<changefreq>{changefreq}</changefreq><priority>{priority}</priority></url>")


@ui.route("/sitemap.xml")
def sitemap():
    base_url = (current_app.config.get("APP_BASE_URL") or request.host_url).rstrip("/")
    today = f"{datetime.utcnow():%Y-%m-%d}"

    lines = [_url(f"{base_url}{path}", today, "weekly", priority) for path, priority in STATIC_PAGES]

    posts = (BlogPost.query
             .filter(BlogPost.hidden == 0, BlogPost.published == 1)
             .order_by(BlogPost.created_at.desc())
             .all())
    for post in posts:
        lastmod = f"{post.created_at:%Y-%m-%d}" if post.created_at else today
        lines.append(_url(f"{base_url}/blog/{post.id}", lastmod, "monthly", "0.6"))

    xml = ('<?xml version="1.0" encoding="UTF-8"?>\n'
           '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
           + "\n".join(lines)
           + "\n</urlset>")
    resp = make_response(xml)
    resp.headers["Content-Type"] = "application/xml"
    return resp

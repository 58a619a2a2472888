"""SQLAlchemy models for portfolio content."""

from datetime import datetime

from extensions import db


class Experience(db.Model):
    """A job or engagement on the timeline."""

    __tablename__ = "experience"

    id = db.Column(db.String(36), primary_key=True)
    company = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(100), nullable=False)
    period = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text)
    badge = db.Column(db.String(20), default="work")
    order_num = db.Column(db.Integer, default=0)
    hidden = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Education(db.Model):
    __tablename__ = "education"

    id = db.Column(db.String(36), primary_key=True)
    institution = db.Column(db.String(100), nullable=False)
    degree = db.Column(db.String(100), nullable=False)
    period = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text)
    badge = db.Column(db.String(20), default="education")
    order_num = db.Column(db.Integer, default=0)
    hidden = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Project(db.Model):
    """A portfolio project. At most one row is featured."""

    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    tags = db.Column(db.Text)  # JSON array
    image_url = db.Column(db.String(500))
    project_url = db.Column(db.String(500))
    github_url = db.Column(db.String(500))
    featured = db.Column(db.Integer, default=0, nullable=False)
    order_num = db.Column(db.Integer, default=0)
    hidden = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class BlogPost(db.Model):
    """A blog post. At most one row is featured; drafts have published = 0."""

    __tablename__ = "blog"

    id = db.Column(db.String(36), primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text)
    excerpt = db.Column(db.String(500))
    tags = db.Column(db.Text)  # JSON array
    image_url = db.Column(db.String(500))
    read_time = db.Column(db.Integer, default=5)
    featured = db.Column(db.Integer, default=0, nullable=False)
    published = db.Column(db.Integer, default=0, nullable=False)
    order_num = db.Column(db.Integer, default=0)
    hidden = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class SkillGroup(db.Model):
    __tablename__ = "skills"

    id = db.Column(db.String(36), primary_key=True)
    category = db.Column(db.String(100), nullable=False)
    skills = db.Column(db.Text)  # JSON array
    hidden = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

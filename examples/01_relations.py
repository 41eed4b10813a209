"""
Example 01: Declaring Relations

This example declares a small blog schema, eager-loads nested relations and
shows the explicit lazy-load path.
"""

from row_orm import (
    ConnectionConfig,
    Engine,
    Model,
    ModelQuery,
    belongs_to,
    belongs_to_many,
    has_many,
    has_one,
)


class Author(Model):
    profile = has_one("Profile")
    articles = has_many("Article")


class Profile(Model):
    author = belongs_to("Author")


class Article(Model):
    author = belongs_to("Author")
    labels = belongs_to_many("Label")  # pivot table: article_label


class Label(Model):
    articles = belongs_to_many("Article")


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1, echo=True)
    engine = Engine.from_config(config)

    for statement in [
        "CREATE TABLE authors (id INTEGER PRIMARY KEY, name TEXT)",
        "CREATE TABLE profiles (id INTEGER PRIMARY KEY, author_id INTEGER, bio TEXT)",
        "CREATE TABLE articles (id INTEGER PRIMARY KEY, author_id INTEGER, title TEXT)",
        "CREATE TABLE labels (id INTEGER PRIMARY KEY, name TEXT)",
        "CREATE TABLE article_label (article_id INTEGER, label_id INTEGER)",
        "INSERT INTO authors VALUES (1, 'Ada'), (2, 'Grace')",
        "INSERT INTO profiles VALUES (1, 1, 'Analyst')",
        "INSERT INTO articles VALUES (10, 1, 'Notes'), (11, 1, 'Engines'), (12, 2, 'Compilers')",
        "INSERT INTO labels VALUES (1, 'history'), (2, 'computing')",
        "INSERT INTO article_label VALUES (10, 1), (11, 2), (12, 2)",
    ]:
        engine.execute(statement)

    # One query for authors, one for profiles, one for articles, two for labels
    authors = (
        ModelQuery(engine, Author)
        .with_relations("profile", "articles.labels")
        .order_by("id")
        .fetch_all()
    )
    for author in authors:
        bio = author.profile.bio if author.profile else "(no profile)"
        print(f"{author.name}: {bio}")
        for article in author.articles:
            print(f"  {article.title} {[label.name for label in article.labels]}")

    # Relations are never fetched on attribute access; load() is explicit
    label = ModelQuery(engine, Label).find(2)
    print(f"{label.name}: {[a.title for a in label.load('articles')]}")

    engine.close()


if __name__ == "__main__":
    main()

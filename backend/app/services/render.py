"""HTML rendition of an extracted article.

The page runs under ``script-src 'none'`` / ``frame-src 'none'``; ``content``
is inserted as-is (it has been sanitized), every other value is escaped.
"""

from datetime import datetime, timezone
from html import escape

from app.config import construct_iv_url, settings
from app.schemas.article import ArticleMetadata
from app.services.urls import hostname_of

PAGE_STYLE = """
    * {
      font-family: serif;
    }

    p {
      line-height: 1.5;
      margin-top: 1.5rem;
      margin-bottom: 1.5rem;
    }

    .byline {
      padding-top: 0.5rem;
      font-style: normal;
    }

    .byline a {
      text-decoration: none;
      color: #79828B;
    }

    .article-header {
      padding-bottom: 1.5rem;
    }

    .article-body {
      padding-top: 0rem;
      padding-bottom: 0rem;
    }

    .page-footer {
      padding-top: 0rem;
      padding-bottom: 1.0rem;
    }

    hr {
      margin-left: 1rem;
      margin-right: 1rem;
    }

    figure {
      margin: 1.5rem 0;
      text-align: center;
    }

    figcaption {
      font-size: 0.9em;
      color: #666;
      margin-top: 0.5rem;
    }
"""

# Served to clients identifying as this bot so the service never fetches itself
LOOP_GUARD_PAGE = """<html>
<head><title>Catastrophic Server Error</title></head>
<body>
  <p>Server is down. (<a href="https://www.youtube.com/watch?v=dQw4w9WgXcQ">🛠︎ Debug</a>)</p>
</body>
</html>
"""


def _e(value: str | None) -> str:
    return escape(value or "", quote=True)


def attribution(meta: ArticleMetadata) -> str:
    """``byline • site`` (whichever exist), else the source host."""
    parts = [v for v in (meta.byline, meta.site_name) if v]
    return " • ".join(parts) or hostname_of(meta.url)


def render_article(meta: ArticleMetadata, generated_at: datetime | None = None) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    byline = attribution(meta)
    site_name = meta.site_name or hostname_of(meta.url)
    lang_attr = f' lang="{_e(meta.lang)}"' if meta.lang else ""
    dir_attr = f' dir="{_e(meta.dir)}"' if meta.dir else ""
    og_image = (
        f'<meta property="og:image" content="{_e(meta.image_url)}">' if meta.image_url else ""
    )
    app_url = settings.APP_URL

    return f"""<!DOCTYPE html>
<html{lang_attr}{dir_attr}>

<head>
  <meta charset="UTF-8">
  <meta http-equiv="X-UA-Compatible" content="IE=edge">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta name="referrer" content="same-origin">
  <meta http-equiv="Content-Security-Policy" content="script-src 'none';">
  <meta http-equiv="Content-Security-Policy" content="frame-src 'none';">
  <meta name="description" content="{_e(meta.excerpt)}">
  <meta property="og:type" content="article">
  <meta property="og:title" content="{_e(meta.title)}">
  <meta property="og:site_name" content="{_e(site_name)}">
  <meta property="og:description" content="{_e(meta.excerpt)}">
  <meta property="article:author" content="{_e(byline)}">
  {og_image}
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/bulma@0.9.3/css/bulma.min.css">
  <title>{_e(meta.title)}</title>
  <style>{PAGE_STYLE}  </style>
</head>

<body>
  <main class="container is-max-desktop">
    <header class="section article-header">
      <h1 class="title">
        {_e(meta.title)}
      </h1>
      <address class="subtitle byline">
        <a rel="author" href="{_e(meta.url)}" target="_blank">
        {_e(byline)}
        </a>
      </address>
    </header>
    <article class="section article-body is-size-5 content">
      {meta.content}
    </article>

    <hr />
    <footer class="section page-footer is-size-7">
      <small>The article(<a title="Telegram Instant View link" href="{_e(construct_iv_url(meta.url))}">IV</a>) is scraped and extracted from <a title="Source link" href="{_e(meta.url)}" target="_blank">{_e(site_name)}</a> by <a href="{_e(app_url)}">readability-bot</a> at <time datetime="{generated_at.isoformat()}">{generated_at.strftime("%a %b %d %Y %H:%M:%S %Z")}</time>.</small>
    </footer>
  </main>
</body>

</html>
"""

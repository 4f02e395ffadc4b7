"""HTML templates for the listing and post pages."""

from __future__ import annotations

import html
import re
from typing import Iterable

from spacetraveling.models import PostSummary
from spacetraveling.services.dates import format_publication_date

FALLBACK_TEXT = "Carregando..."
LOAD_MORE_TEXT = "Carregar mais posts"

_PLACEHOLDER = re.compile(r"\{\{ (\w+) \}\}")

BASE_STYLE = """
      :root {
        color-scheme: dark;
        font-family: "Inter", system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
        --color-background: #1a1d23;
        --color-heading: #f8f8f8;
        --color-body: #d7d7d7;
        --color-info: #bbbbbb;
        --color-highlight: #ff57b2;
        background: var(--color-background);
        color: var(--color-body);
      }

      body {
        margin: 0;
      }

      a {
        color: inherit;
        text-decoration: none;
      }

      header {
        max-width: 1120px;
        margin: 0 auto;
        padding: 80px 32px 0;
      }

      header a {
        font-size: 2rem;
        font-weight: 700;
        color: var(--color-heading);
      }

      header a span {
        color: var(--color-highlight);
      }

      .container {
        max-width: 1120px;
        margin: 0 auto;
        padding: 0 32px;
      }

      .posts-container {
        max-width: 700px;
        margin: 0 auto;
      }

      .info {
        display: flex;
        align-items: center;
        gap: 20px;
        margin-top: 24px;
        font-size: 0.875rem;
        color: var(--color-info);
      }
"""

HEADER_HTML = """
    <header>
      <a href="/"><img src="/logo.svg" alt="logo" hidden />spacetraveling<span>.</span></a>
    </header>
"""

HOME_HTML = """
<!DOCTYPE html>
<html lang="{{ lang }}">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Home | {{ site_name }}</title>
    <style>
{{ base_style }}
      .posts a {
        display: block;
        margin-top: 48px;
      }

      .posts strong {
        display: block;
        font-size: 1.75rem;
        color: var(--color-heading);
      }

      .posts p {
        margin: 8px 0 0;
        font-size: 1.125rem;
      }

      .posts button {
        margin: 48px 0 80px;
        border: none;
        background: none;
        font-size: 1.125rem;
        font-weight: 600;
        color: var(--color-highlight);
        cursor: pointer;
      }

      .posts button:disabled {
        opacity: 0.6;
        cursor: wait;
      }

      .status {
        min-height: 24px;
        color: var(--color-highlight);
      }
    </style>
  </head>
  <body>
{{ header }}
    <main class="container">
      <div class="posts posts-container">
        <div id="post-list">
{{ posts }}
        </div>
{{ load_more }}
        <p class="status" id="status" role="status"></p>
      </div>
    </main>
    <script>
      window.addEventListener("DOMContentLoaded", () => {
        const button = document.getElementById("load-more");
        const postList = document.getElementById("post-list");
        const statusEl = document.getElementById("status");

        if (!button || !postList || !statusEl) {
          return;
        }

        let inFlight = false;

        button.addEventListener("click", async () => {
          const cursor = button.dataset.cursor;
          if (!cursor || inFlight) {
            return;
          }

          inFlight = true;
          button.disabled = true;
          statusEl.textContent = "";

          try {
            const response = await fetch(button.dataset.endpoint, {
              method: "POST",
              headers: { "Content-Type": "application/json" },
              body: JSON.stringify({ cursor }),
            });
            if (!response.ok) {
              throw new Error("Request failed with status " + response.status);
            }
            const payload = await response.json();
            postList.insertAdjacentHTML("beforeend", payload.html);

            if (payload.next_page) {
              button.dataset.cursor = payload.next_page;
            } else {
              button.remove();
            }
          } catch (error) {
            console.error(error);
            statusEl.textContent = "Não foi possível carregar mais posts.";
          } finally {
            inFlight = false;
            button.disabled = false;
          }
        });
      });
    </script>
  </body>
</html>
"""

LOAD_MORE_HTML = """
        <button type="button" id="load-more" data-cursor="{{ cursor }}" data-endpoint="{{ endpoint }}">{{ label }}</button>
"""

POST_ITEM_HTML = """
          <a href="/post/{{ uid }}" data-uid="{{ uid }}">
            <strong>{{ title }}</strong>
            <p>{{ subtitle }}</p>
            <div class="info">
              <time>{{ date }}</time>
              <span>{{ author }}</span>
            </div>
          </a>
"""

POST_HTML = """
<!DOCTYPE html>
<html lang="{{ lang }}">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{{ title }} | {{ site_name }}</title>
    <style>
{{ base_style }}
      .banner {
        display: block;
        width: 100%;
        max-height: 400px;
        margin-top: 64px;
        object-fit: cover;
      }

      .post h1 {
        margin: 80px 0 0;
        font-size: 3rem;
        color: var(--color-heading);
      }

      .content {
        margin: 64px 0 80px;
        line-height: 1.6;
      }

      .content h3 {
        margin: 48px 0 0;
        font-size: 2.25rem;
        color: var(--color-heading);
      }
    </style>
  </head>
  <body>
{{ header }}
    <img class="banner" src="{{ banner }}" alt="banner" />
    <div class="container">
      <article class="post posts-container">
        <h1>{{ title }}</h1>
        <div class="info">
          <time>{{ date }}</time>
          <span>{{ author }}</span>
          <span>{{ reading_time }} min</span>
        </div>
        <div class="content">
{{ content }}
        </div>
      </article>
    </div>
  </body>
</html>
"""

CONTENT_BLOCK_HTML = """
          <section>
            <h3>{{ heading }}</h3>
            <div>{{ body }}</div>
          </section>
"""

FALLBACK_HTML = """
<!DOCTYPE html>
<html lang="{{ lang }}">
  <head>
    <meta charset="utf-8" />
    <meta http-equiv="refresh" content="{{ refresh }}" />
    <title>{{ site_name }}</title>
  </head>
  <body>
    <div>{{ text }}</div>
  </body>
</html>
"""

NOT_FOUND_HTML = """
<!DOCTYPE html>
<html lang="{{ lang }}">
  <head>
    <meta charset="utf-8" />
    <title>Post não encontrado | {{ site_name }}</title>
    <style>
{{ base_style }}
    </style>
  </head>
  <body>
{{ header }}
    <main class="container">
      <p class="posts-container">Post não encontrado.</p>
    </main>
  </body>
</html>
"""


def fill(template: str, **values: object) -> str:
    """Substitute ``{{ name }}`` placeholders in a single pass; values are inserted verbatim."""

    def _replace(match: re.Match[str]) -> str:
        value = values.get(match.group(1), match.group(0))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_replace, template)


def escape(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def render_post_items(posts: Iterable[PostSummary], locale: str) -> str:
    """Render listing entries; used by the full page and the load-more endpoint."""

    return "".join(
        fill(
            POST_ITEM_HTML,
            uid=escape(post.uid),
            title=escape(post.title),
            subtitle=escape(post.subtitle),
            date=escape(format_publication_date(post.first_publication_date, locale)),
            author=escape(post.author),
        )
        for post in posts
    )

# ----------------------
# file   : blog/ssr/html_stream.py
# function: wrap rendered markup with the HTML shell (metadata spliced into <title></title>)
# ----------------------

import json
from dataclasses import dataclass
from typing import AsyncIterator

from blog.ssr.renderer import RenderContext

APP_ANCHOR = '<div id="app"></div>'
TITLE_PLACEHOLDER = "<title></title>"


@dataclass(frozen=True)
class ShellTemplate:
    head: str
    tail: str

    def render_head(self, context: RenderContext) -> str:
        if context.meta is None:
            return self.head
        return self.head.replace(TITLE_PLACEHOLDER, context.meta.inject(), 1)


# ----------------------
# param   : html - shell document
# function: split around the app anchor
# return  : ShellTemplate
# ----------------------
def parse_template(html: str) -> ShellTemplate:
    if APP_ANCHOR not in html:
        raise ValueError(f"template has no {APP_ANCHOR} anchor")
    head, tail = html.split(APP_ANCHOR, 1)
    return ShellTemplate(head=head, tail=tail)


def serialize_state(state) -> str:
    data = json.dumps(state, default=str).replace("</", "<\\/")
    return f"<script>window.__INITIAL_STATE__={data}</script>"


# ----------------------
# param   : template - parsed shell
# param   : context - render context (meta is set once rendering has started)
# param   : chunks - rendered markup
# return  : async iterator of the full document
# ----------------------
async def html_stream(template: ShellTemplate, context: RenderContext, chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    started = False
    async for chunk in chunks:
        if not started:
            yield template.render_head(context)
            yield '<div id="app" data-server-rendered="true">'
            started = True
        yield chunk
    if not started:
        yield template.render_head(context)
        yield '<div id="app" data-server-rendered="true">'
    yield "</div>"
    if context.state is not None:
        yield serialize_state(context.state)
    yield template.tail

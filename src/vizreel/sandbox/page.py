"""Host page and injected helpers for the browser sandbox."""

import html

from vizreel.validation.scene_validator import FRAME_HOOK_NAME

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
{scripts}
</head>
<body style="margin:0;overflow:hidden;background:#000;"></body>
</html>
"""

# Runs the script through indirect eval so it executes in global scope without
# being spliced into HTML. The hook is bound once here; later reassignments of
# the global do not change which function the capturer drives.
INIT_SCRIPT = """
(code) => {
  try {
    (0, eval)(code);
  } catch (err) {
    return { ok: false, error: 'Script setup failed: ' + String(err && err.stack || err) };
  }
  const hook = window.%(hook)s;
  if (typeof hook !== 'function') {
    return { ok: false, error: 'Script did not define window.%(hook)s' };
  }
  Object.defineProperty(window, '__vizreelHook', { value: hook, writable: false });
  return { ok: true, error: null };
}
""" % {"hook": FRAME_HOOK_NAME}

ADVANCE_SCRIPT = """
async (index) => {
  try {
    await window.__vizreelHook(index);
    return { ok: true, error: null };
  } catch (err) {
    return { ok: false, error: 'Frame ' + index + ' failed: ' + String(err && err.stack || err) };
  }
}
"""


def build_page_html(library_urls: list[str]) -> str:
    """Build the host page that preloads the given libraries in order."""
    scripts = "\n".join(
        f'<script src="{html.escape(url, quote=True)}"></script>' for url in library_urls
    )
    return PAGE_TEMPLATE.format(scripts=scripts)

"""Compiler stages that turn page bodies into client-ready markup.

Each stage is a text-to-text rewrite. Bodies pass through localization
(:mod:`.localization`), directive translation (:mod:`.directives`) and
binding substitution (:mod:`.bindings`) in that order; page styles and
scripts are compiled separately, and the finished document is minified.
"""

from . import bindings, localization
from .directives import DirectiveTranslator, normalize_expression
from .minifier import Minifier, minify_css, minify_html, minify_js
from .scripts import ScriptCompiler, request_accessor, rewrite_remote_calls, script_json
from .styles import StyleCompiler, prefix_css, scope_css

__all__ = [
    "DirectiveTranslator",
    "Minifier",
    "ScriptCompiler",
    "StyleCompiler",
    "bindings",
    "localization",
    "minify_css",
    "minify_html",
    "minify_js",
    "normalize_expression",
    "prefix_css",
    "request_accessor",
    "rewrite_remote_calls",
    "scope_css",
    "script_json",
]

"""Markdown → plain text reduction.

Removes formatting markup (emphasis, headings, list leaders, links, images,
code fences, html tags, footnotes) while keeping the text and line boundaries.
Patterns are restricted to spaces/tabs where the markup sits at a line edge so a
substitution never joins two lines.
"""

import re

_HRULE = re.compile(r"^[ \t]*(?:[-*_][ \t]*){3,}$", re.M)
_LIST_LEADER = re.compile(r"^([ \t]*)(?:[*\-+]|\d+\.)[ \t]+", re.M)

# gfm
_SETEXT_EQ = re.compile(r"\n={2,}")
_TILDE_FENCE = re.compile(r"^[ \t]*~{3}[^~\n]*\n", re.M)
_STRIKE_DOUBLE = re.compile(r"~~")
_BACKTICK_FENCE = re.compile(r"^[ \t]*`{3}[^`\n]*\n", re.M)

_HTML_TAG = re.compile(r"<[^>\n]*>")
_SETEXT = re.compile(r"^[=\-]{2,}[ \t]*$", re.M)
_FOOTNOTE = re.compile(r"\[\^.+?\](?:: .*?$)?", re.M)
_REF_DEF = re.compile(r"^[ \t]{0,2}\[.*?\]: .*?$", re.M)
_IMAGE = re.compile(r"!\[(.*?)\][\[(].*?[\])]")
_INLINE_LINK = re.compile(r"\[([^\]]*?)\][\[(].*?[\])]")
_BLOCKQUOTE = re.compile(r"^[ \t]{0,3}>[ \t]?", re.M)
_ATX_HEADER = re.compile(r"^[ \t]*#{1,6}[ \t]+(.*?)(?:[ \t]+#+)?[ \t]*$", re.M)
_EMPHASIS_STAR = re.compile(r"(\*+)(\S)(.*?\S)??\1")
_EMPHASIS_UNDERSCORE = re.compile(r"(^|\W)(_+)(\S)(.*?\S)??\2($|\W)")
_CODE_RUN = re.compile(r"(`{3,})(.*?)\1", re.M)
_INLINE_CODE = re.compile(r"`(.+?)`")
_STRIKE = re.compile(r"~(.*?)~")


def strip_markdown(md: str, strip_list_leaders: bool = True, gfm: bool = True, use_img_alt_text: bool = True) -> str:
    if not md:
        return ""
    out = _HRULE.sub("", md)
    if strip_list_leaders:
        out = _LIST_LEADER.sub(r"\1", out)
    if gfm:
        out = _SETEXT_EQ.sub("\n", out)
        out = _TILDE_FENCE.sub("", out)
        out = _STRIKE_DOUBLE.sub("", out)
        out = _BACKTICK_FENCE.sub("", out)
    out = _HTML_TAG.sub("", out)
    out = _SETEXT.sub("", out)
    out = _FOOTNOTE.sub("", out)
    out = _REF_DEF.sub("", out)
    out = _IMAGE.sub(r"\1" if use_img_alt_text else "", out)
    out = _INLINE_LINK.sub(r"\1", out)
    out = _BLOCKQUOTE.sub("", out)
    out = _ATX_HEADER.sub(r"\1", out)
    out = _EMPHASIS_STAR.sub(r"\2\3", out)
    out = _EMPHASIS_UNDERSCORE.sub(r"\1\3\4\5", out)
    out = _CODE_RUN.sub(r"\2", out)
    out = _INLINE_CODE.sub(r"\1", out)
    out = _STRIKE.sub(r"\1", out)
    return out


def identity(text: str) -> str:
    return text

from __future__ import annotations

"""
Ready-made lexical rules for common languages.

Nothing here is registered on import; call register_default_rules() to add
them to the language table. Style tags are Pygments token names (what the
Qt highlighter attaches to each character) plus ``None`` so the rules keep
working on undecorated text, where keyword exclusion does the filtering.
"""

from typing import Dict, Iterable, List, Optional

from .rules import LexicalRule, register_rule

IDENT_TAGS = (None, "Token.Name", "Token.Name.Other", "Token.Name.Variable", "Token.Name.Function")

# not after "." (member access); the line start counts as a newline
_NO_MEMBER = r"(?:[^.\s]|\n)\s*"
# C family also rejects "->"
_NO_MEMBER_OR_ARROW = r"(?:[^.>\s]|(?<!-)>|\n)\s*"

_C_IDENT = r"(?<![\w$])([A-Za-z_]\w*)"
_JS_IDENT = r"(?<![\w$])([A-Za-z_$][\w$]*)"
_LISP_DELIMS = r"\s()\[\]{}'\"`,;@#"
_LISP_IDENT = rf"(?<![^{_LISP_DELIMS}])([^{_LISP_DELIMS}\d:][^{_LISP_DELIMS}]*)"


def _words(words: str, ident_end: str = r"(?![\w$])") -> str:
    return "(?:" + "|".join(sorted(words.split(), key=len, reverse=True)) + ")" + ident_end


_PY_KW = _words(
    "False None True and as assert async await break class continue def del elif else except "
    "finally for from global if import in is lambda nonlocal not or pass raise return try while "
    "with yield"
)
_JS_KW = _words(
    "break case catch class const continue debugger default delete do else export extends false "
    "finally for function if import in instanceof let new null return super switch this throw true "
    "try typeof undefined var void while with yield async await of static get set"
)
_TS_KW = _words(
    "break case catch class const continue debugger default delete do else enum export extends false "
    "finally for function if import in instanceof let new null return super switch this throw true "
    "try typeof undefined var void while with yield async await of static get set interface type "
    "implements private public protected readonly declare namespace abstract as any number string "
    "boolean never unknown keyof"
)
_C_KW = _words(
    "auto break case char const continue default do double else enum extern float for goto if inline "
    "int long register restrict return short signed sizeof static struct switch typedef union unsigned "
    "void volatile while bool true false NULL"
)
_CPP_KW = _words(
    "auto break case char const continue default do double else enum extern float for goto if inline "
    "int long register return short signed sizeof static struct switch typedef union unsigned void "
    "volatile while bool true false nullptr class namespace template typename public private protected "
    "virtual override final new delete this using operator friend constexpr noexcept static_cast "
    "dynamic_cast reinterpret_cast const_cast try catch throw"
)
_JAVA_KW = _words(
    "abstract assert boolean break byte case catch char class const continue default do double else "
    "enum extends final finally float for goto if implements import instanceof int interface long "
    "native new package private protected public return short static strictfp super switch "
    "synchronized this throw throws transient try void volatile while true false null var record"
)
_GO_KW = _words(
    "break case chan const continue default defer else fallthrough for func go goto if import "
    "interface map package range return select struct switch type var true false nil iota"
)
_RUST_KW = _words(
    "as async await break const continue crate dyn else enum extern false fn for if impl in let loop "
    "match mod move mut pub ref return self Self static struct super trait true type unsafe use where while"
)
_RUBY_KW = _words(
    "BEGIN END alias and begin break case class def defined do else elsif end ensure false for if in "
    "module next nil not or redo rescue retry return self super then true undef unless until when "
    "while yield"
)
_LUA_KW = _words(
    "and break do else elseif end false for function goto if in local nil not or repeat return then "
    "true until while"
)
_LISP_KW = _words(
    "defun defmacro defvar defcustom defconst let let\\* lambda if when unless cond progn setq "
    "setf nil t quote function and or not",
    ident_end=rf"(?![^{_LISP_DELIMS}])",
)
_CLJ_KW = _words(
    "def defn defn- defmacro fn let loop recur if when when-not cond do nil true false ns require "
    "import quote var",
    ident_end=rf"(?![^{_LISP_DELIMS}])",
)

DEFAULT_RULES: Dict[str, LexicalRule] = {
    "python": LexicalRule(_NO_MEMBER, _C_IDENT, IDENT_TAGS, _PY_KW),
    "javascript": LexicalRule(_NO_MEMBER, _JS_IDENT, IDENT_TAGS, _JS_KW),
    "typescript": LexicalRule(_NO_MEMBER, _JS_IDENT, IDENT_TAGS, _TS_KW),
    "c": LexicalRule(_NO_MEMBER_OR_ARROW, _C_IDENT, IDENT_TAGS, _C_KW),
    "cpp": LexicalRule(_NO_MEMBER_OR_ARROW, _C_IDENT, IDENT_TAGS, _CPP_KW),
    "java": LexicalRule(_NO_MEMBER, _C_IDENT, IDENT_TAGS, _JAVA_KW),
    "go": LexicalRule(_NO_MEMBER, _C_IDENT, IDENT_TAGS, _GO_KW),
    "rust": LexicalRule(_NO_MEMBER, _C_IDENT, IDENT_TAGS, _RUST_KW),
    "ruby": LexicalRule(_NO_MEMBER, r"(?<![\w@$:])([A-Za-z_]\w*[?!]?)", IDENT_TAGS, _RUBY_KW),
    "lua": LexicalRule(r"(?:[^.:\s]|\n)\s*", _C_IDENT, IDENT_TAGS, _LUA_KW),
    "clojure": LexicalRule(r"(?:[^:]|\n)", _LISP_IDENT, IDENT_TAGS, _CLJ_KW),
    "elisp": LexicalRule(r"(?:[^:]|\n)", _LISP_IDENT, IDENT_TAGS, _LISP_KW),
}

ALIASES: Dict[str, str] = {
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "h": "c",
    "c++": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "golang": "go",
    "rs": "rust",
    "rb": "ruby",
    "clj": "clojure",
    "emacs-lisp": "elisp",
    "lisp": "elisp",
}


def canonical_language(language: Optional[str]) -> str:
    lang = (language or "").strip().lower()
    return ALIASES.get(lang, lang)


def register_default_rules(languages: Optional[Iterable[str]] = None) -> List[str]:
    """Register the bundled rules (all of them, or the named subset, aliases
    included). Returns the language tags registered."""
    wanted = set(DEFAULT_RULES) if languages is None else {canonical_language(l) for l in languages}
    done: List[str] = []
    for lang, rule in DEFAULT_RULES.items():
        if lang not in wanted:
            continue
        register_rule(lang, rule)
        done.append(lang)
        for alias, target in ALIASES.items():
            if target == lang:
                register_rule(alias, rule)
                done.append(alias)
    return done

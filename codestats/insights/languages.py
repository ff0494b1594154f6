"""
Display colors for recognized languages.

Colors follow GitHub Linguist so charts match what users see on code hosts.
Only the languages that show up in practice are listed; anything else is
drawn with FALLBACK_COLOR.
"""

from typing import Mapping, Optional

FALLBACK_COLOR = "gray"

LANGUAGE_COLORS: Mapping[str, str] = {
    "ABAP": "#E8274B",
    "ActionScript": "#882B0F",
    "Ada": "#02f88c",
    "Assembly": "#6E4C13",
    "Astro": "#ff5a03",
    "Batchfile": "#C1F12E",
    "C": "#555555",
    "C#": "#178600",
    "C++": "#f34b7d",
    "Clojure": "#db5855",
    "CMake": "#DA3434",
    "CoffeeScript": "#244776",
    "Common Lisp": "#3fb68b",
    "Crystal": "#000100",
    "CSS": "#563d7c",
    "Cuda": "#3A4E3A",
    "D": "#ba595e",
    "Dart": "#00B4AB",
    "Dockerfile": "#384d54",
    "Elixir": "#6e4a7e",
    "Elm": "#60B5CC",
    "Emacs Lisp": "#c065db",
    "Erlang": "#B83998",
    "F#": "#b845fc",
    "Fortran": "#4d41b1",
    "Go": "#00ADD8",
    "GraphQL": "#e10098",
    "Groovy": "#4298b8",
    "Haskell": "#5e5086",
    "HCL": "#844FBA",
    "HTML": "#e34c26",
    "Java": "#b07219",
    "JavaScript": "#f1e05a",
    "JSON": "#292929",
    "Julia": "#a270ba",
    "Jupyter Notebook": "#DA5B0B",
    "Kotlin": "#A97BFF",
    "Less": "#1d365d",
    "Lua": "#000080",
    "Makefile": "#427819",
    "Markdown": "#083fa1",
    "MATLAB": "#e16737",
    "Nix": "#7e7eff",
    "Objective-C": "#438eff",
    "OCaml": "#3be133",
    "Perl": "#0298c3",
    "PHP": "#4F5D95",
    "PowerShell": "#012456",
    "Protocol Buffer": "#4a4a4a",
    "Python": "#3572A5",
    "R": "#198CE7",
    "Racket": "#3c5caa",
    "Ruby": "#701516",
    "Rust": "#dea584",
    "Sass": "#a53b70",
    "Scala": "#c22d40",
    "SCSS": "#c6538c",
    "Shell": "#89e051",
    "Solidity": "#AA6746",
    "SQL": "#e38c00",
    "Starlark": "#76d275",
    "Svelte": "#ff3e00",
    "Swift": "#F05138",
    "TeX": "#3D6117",
    "Terraform": "#5c4ee5",
    "TOML": "#9c4221",
    "TSX": "#3178c6",
    "TypeScript": "#3178c6",
    "Vim Script": "#199f4b",
    "Vue": "#41b883",
    "WebAssembly": "#04133b",
    "XML": "#0060ac",
    "YAML": "#cb171e",
    "Zig": "#ec915c",
}


def language_color(name: str) -> Optional[str]:
    """Return the display color for a known language, or None."""
    return LANGUAGE_COLORS.get(name)

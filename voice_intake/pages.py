# voice_intake/pages.py
from __future__ import annotations

from html import escape
from typing import Optional

CLINIC_NAME = "さくら内科クリニック"

_INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="ja">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{clinic} 音声問診システム</title>
</head>
<body>
  <main>
    <h1>🏥 {clinic}</h1>
    <p>音声問診システム</p>
    <p>{greeting}</p>
    <ul>
      <li><code>POST /api/transcribe</code> 音声ファイルの文字起こし</li>
      <li><code>POST /api/summarize</code> 問診内容の要約</li>
      <li><code>POST /api/diagnose</code> 診断支援情報の生成</li>
    </ul>
    <p>⚠️ 注意: これらの情報は診断の参考であり、最終的な診断は医師の判断によります。</p>
  </main>
</body>
</html>
"""


def render_index(username: Optional[str] = None) -> str:
    greeting = f"ようこそ、{escape(username)} さん" if username else "ようこそ"
    return _INDEX_TEMPLATE.format(clinic=CLINIC_NAME, greeting=greeting)

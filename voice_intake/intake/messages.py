# voice_intake/intake/messages.py
"""User-facing advisories shown in the intake UI."""

IOS_SAFARI_ADVISORY = "iOSのSafariをご利用の場合、音声ファイルのアップロード機能をご利用ください。"
UPLOAD_ONLY_ADVISORY = "このブラウザでは音声ファイルアップロード機能をご利用ください。"
MANUAL_FALLBACK_ADVISORY = "音声認識を開始できませんでした。テキストで症状を入力してください。"

MIC_PERMISSION_DENIED = "マイクへのアクセスが拒否されました。ブラウザの設定でマイクの使用を許可してください。"
NO_SPEECH_DETECTED = "音声が検出されませんでした。もう一度お試しください。"
RECOGNITION_FAILED = "音声認識エラーが発生しました。"

MIC_UNAVAILABLE = "マイクにアクセスできませんでした。ブラウザの設定を確認してください。"
NOT_AUDIO_FILE = "音声ファイルを選択してください。"
AUDIO_TOO_LARGE = "音声ファイルが大きすぎます（最大25MB）。"

TRANSCRIPTION_FAILED = "音声の処理中にエラーが発生しました。"
UPLOAD_FAILED = "音声ファイルのアップロード中にエラーが発生しました。"
AI_PROCESSING_FAILED = "AI処理中にエラーが発生しました。"
DIAGNOSIS_FAILED = "診断支援の生成中にエラーが発生しました。"

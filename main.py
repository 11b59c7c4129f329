#!/usr/bin/env python3
"""
スロットレイアウトプランナー - メインエントリーポイント

このファイルは、デモアプリケーションを起動するためのメインエントリーポイントです。
"""

import sys
import os

# プロジェクトルートをパスに追加
sys.path.append(os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    # Streamlitアプリを起動
    import streamlit.web.cli as stcli
    from utils.config import get_config

    config = get_config()

    # src/app/streamlit_slot_layout_demo.pyを起動
    app_path = os.path.join(os.path.dirname(__file__), "src", "app", "streamlit_slot_layout_demo.py")

    if os.path.exists(app_path):
        print("🚀 スロットレイアウトプランナーを起動中...")
        print(f"📁 アプリケーションパス: {app_path}")
        print(f"🌐 ブラウザで http://localhost:{config.streamlit_server_port} にアクセスしてください")

        sys.argv = [
            "streamlit", "run", app_path,
            f"--server.port={config.streamlit_server_port}",
            f"--server.address={config.streamlit_server_address}"
        ]
        sys.exit(stcli.main())
    else:
        print(f"❌ エラー: アプリケーションファイルが見つかりません: {app_path}")
        sys.exit(1)

"""イベント送信スクリプト。

HTTP POST で /api/v1/events に任意のイベントを送信する開発・テスト用スクリプト。

例:
    python hack/send_event.py message --author alice --tag general --content hi
    python hack/send_event.py key --payload '{"key": "quick_switcher"}'
"""

import argparse
import http.client
import json
import sys
import time
from datetime import datetime, timezone


def create_parser() -> argparse.ArgumentParser:
    """コマンドライン引数パーサーを作成する。"""
    parser = argparse.ArgumentParser(
        description="イベントをサーバーに送信する",
    )
    parser.add_argument("type", help="イベントタイプ (message, key, action など)")
    parser.add_argument(
        "-H",
        "--host",
        default="localhost",
        help="サーバーホスト (デフォルト: localhost)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=8080,
        help="サーバーポート (デフォルト: 8080)",
    )
    parser.add_argument(
        "--payload",
        default="{}",
        help="イベントのペイロード (JSON 文字列)",
    )
    parser.add_argument(
        "--author",
        default="anonymous",
        help="message イベントの投稿者",
    )
    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="message イベントのハッシュタグ (複数指定可)",
    )
    parser.add_argument(
        "--content",
        default="",
        help="message イベントの本文",
    )
    parser.add_argument(
        "-n",
        "--count",
        type=int,
        default=1,
        help="送信回数 (デフォルト: 1)",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=0.0,
        help="送信間隔（秒） (デフォルト: 0.0)",
    )
    return parser


def build_payload(args: argparse.Namespace, seq: int) -> dict:
    """送信するペイロードを組み立てる。

    message イベントは --author, --tag, --content から生成する。
    """
    if args.type != "message":
        return json.loads(args.payload)

    now = datetime.now(timezone.utc)
    return {
        "message": {
            "id": f"hack-{int(now.timestamp() * 1000)}-{seq}",
            "author": args.author,
            "created_at": now.isoformat(),
            "hashtags": args.tag,
            "content": args.content,
        }
    }


def send_event(host: str, port: int, event_type: str, payload: dict) -> tuple[bool, str]:
    """イベントを送信する。

    Returns:
        (成功フラグ, メッセージ) のタプル
    """
    body = {"type": event_type, "payload": payload}

    try:
        conn = http.client.HTTPConnection(host, port, timeout=30)
        try:
            conn.request(
                "POST",
                "/api/v1/events",
                body=json.dumps(body),
                headers={"Content-Type": "application/json"},
            )
            response = conn.getresponse()
            text = response.read().decode("utf-8")

            if response.status == 200:
                try:
                    return True, json.loads(text).get("event_id", "unknown")
                except json.JSONDecodeError:
                    return False, f"Invalid JSON response: {text}"
            return False, f"{response.status} {response.reason}: {text}"
        finally:
            conn.close()
    except ConnectionRefusedError:
        return False, "Connection refused"
    except TimeoutError:
        return False, "Connection timeout"
    except OSError as e:
        return False, str(e)


def main() -> int:
    """メインエントリーポイント。"""
    parser = create_parser()
    args = parser.parse_args()

    try:
        json.loads(args.payload)
    except json.JSONDecodeError as e:
        print(f"Error: --payload is not valid JSON: {e}")
        return 1

    print(f"Sending {args.type} to http://{args.host}:{args.port}/api/v1/events...")

    for i in range(args.count):
        if i > 0 and args.interval > 0:
            time.sleep(args.interval)

        payload = build_payload(args, i)
        success, message = send_event(args.host, args.port, args.type, payload)

        if success:
            print(f"[{i + 1}/{args.count}] Event ID: {message}")
        else:
            print(f"Error: {message}")
            return 1

    print("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

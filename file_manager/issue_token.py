"""
Print an admin token for the file manager API.

    python -m file_manager.issue_token admin@example.com [ttl_seconds]
"""
import sys

from file_manager.security.jwt import issue_jwt


def main(argv: list[str]) -> int:
    if not argv:
        print("usage: python -m file_manager.issue_token <email> [ttl_seconds]", file=sys.stderr)
        return 2
    ttl = int(argv[1]) if len(argv) > 1 else None
    print(issue_jwt(sub=f"admin:{argv[0]}", role="admin", ttl_seconds=ttl))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

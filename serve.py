#!/usr/bin/env python3
"""Serve the generated static site locally for preview."""

import functools
import http.server
import socketserver
import webbrowser

import musicboard.config as cfg_module

PORT = 8000


class Handler(http.server.SimpleHTTPRequestHandler):
    def log_message(self, format, *args):
        # Suppress default per-request logging; print a cleaner version
        print(f"  {self.command} {self.path}")


def main():
    output_dir = cfg_module.get_output_dir(cfg_module.load())
    if not output_dir.exists() or not any(output_dir.iterdir()):
        print(f"'{output_dir}' is empty or missing. Run 'mb generate' first.")
        return

    handler = functools.partial(Handler, directory=str(output_dir))

    url = f"http://localhost:{PORT}"
    print(f"Serving '{output_dir}/' at {url}")
    print("Press Ctrl+C to stop.\n")
    webbrowser.open(url)

    socketserver.TCPServer.allow_reuse_address = True
    with socketserver.TCPServer(("", PORT), handler) as httpd:
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped.")


if __name__ == "__main__":
    main()

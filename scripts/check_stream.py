"""
scripts/check_stream.py

Diagnostic client for a running watchcast server.
Reads /mjpeg, splits the multipart body into frames and prints the
received frame rate. Optionally shows the frames with OpenCV.
"""
import argparse
import time

import cv2
import httpx
import numpy as np

DEFAULT_URL = "http://localhost:8080/mjpeg"


def iter_parts(chunks, boundary: bytes = b"--frame"):
    """Yields the payload of every multipart part found in `chunks`."""
    buffer = b""
    for chunk in chunks:
        buffer += chunk
        while True:
            start = buffer.find(boundary)
            if start < 0:
                break
            header_end = buffer.find(b"\r\n\r\n", start)
            if header_end < 0:
                break
            headers = buffer[start + len(boundary):header_end].decode("latin-1")
            length = None
            for line in headers.split("\r\n"):
                name, _, value = line.partition(":")
                if name.strip().lower() == "content-length":
                    length = int(value.strip())
            if length is None:
                raise ValueError(f"Part without Content-Length: {headers!r}")

            body_start = header_end + 4
            if len(buffer) < body_start + length:
                break
            yield buffer[body_start:body_start + length]
            buffer = buffer[body_start + length:]


def main():
    parser = argparse.ArgumentParser(description="Measure a watchcast MJPEG stream")
    parser.add_argument("url", nargs="?", default=DEFAULT_URL)
    parser.add_argument("--show", action="store_true", help="Display frames with OpenCV")
    parser.add_argument("--duration", type=float, default=0, help="Stop after N seconds")
    args = parser.parse_args()

    print(f"Opening stream: {args.url}")
    frame_count = 0
    fps_frame_count = 0
    start_time = fps_start_time = time.time()

    try:
        with httpx.stream("GET", args.url, timeout=httpx.Timeout(10.0, read=None)) as response:
            response.raise_for_status()
            print(f"Connected: {response.headers.get('content-type')}")

            for payload in iter_parts(response.iter_bytes()):
                frame_count += 1
                fps_frame_count += 1

                if time.time() - fps_start_time > 1.0:
                    fps = fps_frame_count / (time.time() - fps_start_time)
                    print(f"FPS: {fps:.2f} ({len(payload)} bytes/frame)")
                    fps_frame_count = 0
                    fps_start_time = time.time()

                if args.show:
                    image = cv2.imdecode(np.frombuffer(payload, dtype=np.uint8), cv2.IMREAD_COLOR)
                    if image is not None:
                        cv2.imshow("watchcast", image)
                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        break

                if args.duration and time.time() - start_time > args.duration:
                    break
        print("Stream ended.")
    except httpx.HTTPError as e:
        print(f"Error: {e}")
    except KeyboardInterrupt:
        print("\nInterrupted.")
    finally:
        if args.show:
            cv2.destroyAllWindows()
        print(f"Received {frame_count} frames in {time.time() - start_time:.1f}s")


if __name__ == "__main__":
    main()

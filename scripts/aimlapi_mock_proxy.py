"""Small Flask proxy that simulates the AimlAPI Kling generation endpoints.

POST JSON { "model": "...", "prompt": "...", "image_url": "...", "duration": "5" }
to /v2/generate/video/kling/generation and it returns { "id": "...", "status": "queued" }.
GET the same path with ?generation_id=<id> to poll; after MOCK_RENDER_SECONDS the
status becomes "completed" with a video URL served by this proxy.

Run locally for development:
    python scripts/aimlapi_mock_proxy.py

Then point AIMLAPI_BASE_URL to http://localhost:9092/v2
"""
import os
import time
import hashlib
from flask import Flask, Response, request, jsonify

app = Flask(__name__)
app.config["RENDER_SECONDS"] = float(os.getenv("MOCK_RENDER_SECONDS", "6"))

# generation_id -> submit time
_generations = {}

GENERATION_PATH = "/v2/generate/video/kling/generation"


@app.route(GENERATION_PATH, methods=["POST"])
def submit():
    payload = request.get_json(force=True)
    if not payload.get("image_url"):
        return jsonify({"error": {"name": "ValidationError", "message": "image_url is required"}}), 400

    # Deterministic id from the request, salted with time so repeats are distinct
    key = f"{payload.get('prompt', '')}{payload.get('duration', '5')}{time.time()}".encode("utf-8")
    generation_id = hashlib.sha1(key).hexdigest()[:12]
    _generations[generation_id] = time.time()
    return jsonify({"id": generation_id, "status": "queued"})


@app.route(GENERATION_PATH, methods=["GET"])
def status():
    generation_id = request.args.get("generation_id", "")
    started = _generations.get(generation_id)
    if started is None:
        return jsonify({"id": generation_id, "status": "error", "error": {"message": "generation not found"}})

    elapsed = time.time() - started
    if elapsed < app.config["RENDER_SECONDS"]:
        return jsonify({"id": generation_id, "status": "generating" if elapsed > 1 else "queued"})

    video_url = request.host_url.rstrip("/") + f"/videos/{generation_id}.mp4"
    return jsonify({"id": generation_id, "status": "completed", "video": {"url": video_url}})


@app.route("/videos/<generation_id>.mp4", methods=["GET"])
def video(generation_id):
    return Response(b"MOCK_KLING_MP4\n", mimetype="video/mp4")


if __name__ == "__main__":
    port = int(os.getenv("AIMLAPI_MOCK_PORT", "9092"))
    app.run(host="0.0.0.0", port=port)

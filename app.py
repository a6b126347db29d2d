import logging
import os
import uuid

from flask import Flask, jsonify, request, send_file, url_for
from flask_cors import CORS
from werkzeug.utils import secure_filename

from config import (
    ARCHIVE_SUFFIX,
    CODES_FILENAME,
    COMPRESSED_FILENAME,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_UPLOAD_BYTES,
    UPLOAD_DIR,
)
from hash_table import TableFullError
from huffman import huffman_encoding
from Text_Compression import ArchiveError, compress_file, decompress_file

logger = logging.getLogger(__name__)

# -----------------------------------------------------------
# FLASK APP SETUP
# -----------------------------------------------------------
app = Flask(__name__)
app.config["UPLOAD_DIR"] = UPLOAD_DIR
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES
CORS(app)

# -----------------------------------------------------------
# HELPER FUNCTIONS
# -----------------------------------------------------------
def new_job_dirs():
    """
    Every upload gets its own directory, with the upload kept in
    original/ and everything produced from it in compressed/.
    """
    job = uuid.uuid4().hex
    job_root = os.path.join(app.config["UPLOAD_DIR"], job)
    original_dir = os.path.join(job_root, "original")
    output_dir = os.path.join(job_root, "compressed")
    os.makedirs(original_dir, exist_ok=True)
    os.makedirs(output_dir, exist_ok=True)
    return job, original_dir, output_dir


def output_path(job, filename):
    job = secure_filename(job)
    filename = secure_filename(filename)
    if not job or not filename:
        return None
    return os.path.join(app.config["UPLOAD_DIR"], job, "compressed", filename)


def error(message, status):
    return jsonify({"success": False, "error": message}), status

# -----------------------------------------------------------
# ROUTES
# -----------------------------------------------------------
@app.route("/")
def home():
    return jsonify({
        "service": "huffman-text-compressor",
        "endpoints": ["/compress_file", "/decompress_file", "/api/encode", "/download/<job>/<filename>"],
    })

# -----------------------------------------------------------
# TEXT COMPRESSION ROUTES
# -----------------------------------------------------------
@app.route("/compress_file", methods=["POST"])
def compress_file_route():
    file = request.files.get("file")
    if not file:
        return error("No file uploaded", 400)

    filename = secure_filename(file.filename or "")
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext != "txt":
        return error("Only TXT files allowed", 400)

    try:
        job, original_dir, output_dir = new_job_dirs()
        input_path = os.path.join(original_dir, filename)
        file.save(input_path)

        stats = compress_file(input_path, output_dir)
    except UnicodeDecodeError:
        return error("File is not UTF-8 text", 400)
    except TableFullError as e:
        logger.warning("Upload %s has too many distinct tokens: %s", filename, e)
        return error(str(e), 400)
    except Exception:
        logger.exception("Error in /compress_file")
        return error("Internal server error", 500)

    archive_name = COMPRESSED_FILENAME + ARCHIVE_SUFFIX
    return jsonify({
        "success": True,
        "filename": filename,
        "job": job,
        "original_size": stats["original_size"],
        "compressed_size": stats["compressed_size"],
        "uncompressed_kb": stats["uncompressed_kb"],
        "compressed_kb": stats["compressed_kb"],
        "compression_ratio": stats["compression_ratio"],
        "elapsed_ms": stats["elapsed_ms"],
        "distinct_tokens": stats["distinct_tokens"],
        "bit_length": stats["bit_length"],
        "download_compressed_url": url_for("download", job=job, filename=COMPRESSED_FILENAME),
        "download_codes_url": url_for("download", job=job, filename=CODES_FILENAME),
        "download_archive_url": url_for("download", job=job, filename=archive_name),
    })


@app.route("/decompress_file", methods=["POST"])
def decompress_file_route():
    file = request.files.get("file")
    if not file:
        return error("No file uploaded", 400)

    filename = secure_filename(file.filename or "")
    if not filename.endswith(ARCHIVE_SUFFIX):
        return error("Invalid file type", 400)

    output_filename = filename[:-len(ARCHIVE_SUFFIX)]
    if not output_filename.endswith(".txt"):
        output_filename += ".txt"

    try:
        job, original_dir, output_dir = new_job_dirs()
        input_path = os.path.join(original_dir, filename)
        file.save(input_path)

        result = decompress_file(input_path, os.path.join(output_dir, output_filename))
    except ArchiveError as e:
        logger.warning("Rejected archive %s: %s", filename, e)
        return error(f"Invalid archive: {e}", 400)
    except Exception:
        logger.exception("Error in /decompress_file")
        return error("Internal server error", 500)

    return jsonify({
        "success": True,
        "original_huff": filename,
        "job": job,
        "decompressed_file": output_filename,
        "characters": result["characters"],
        "download_url": url_for("download", job=job, filename=output_filename),
    })


@app.route("/api/encode", methods=["POST"])
def encode():
    data = request.get_json(silent=True)
    text = data.get("text") if isinstance(data, dict) else None
    if not isinstance(text, str):
        return error("JSON body must contain a 'text' string", 400)

    try:
        encoded = huffman_encoding(text)
    except TableFullError as e:
        return error(str(e), 400)

    return jsonify({
        "success": True,
        "codes": dict(encoded.codes.items()),
        "token_count": len(encoded.tokens),
        "bit_length": encoded.bit_length,
        "padding_bits": encoded.padding,
        "data": encoded.data.hex(),
    })


@app.route("/download/<job>/<filename>")
def download(job, filename):
    path = output_path(job, filename)
    if path is None or not os.path.isfile(path):
        return "File not found", 404
    return send_file(path, as_attachment=True, download_name=os.path.basename(path))

# -----------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO), format=LOG_FORMAT)
    app.run(debug=True)

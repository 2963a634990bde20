"""All magic numbers and configuration constants."""

# Slideshow
PHOTO_DURATION = 5.0                # seconds each photo is on screen
FADE_DURATION = 1.0                 # seconds of crossfade between photos
VIDEO_WIDTH = 1920
VIDEO_HEIGHT = 1080
VIDEO_FPS = 30
BATCH_SIZE = 100                    # images per ffmpeg invocation
ZOOM_STEP = 0.001                   # zoompan increment per frame
ENCODER_THREADS = 6
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")
BATCH_PREFIX = "batch_"
MERGE_PREFIX = "merge_"
ALBUM_IMAGE_PREFIX = "image_"       # downloaded from an album
PHOTO_IMAGE_PREFIX = "photo_"       # downloaded from a photo config
TRANSITIONS = ("concat", "crossfade")

# Immich
API_KEY_HEADER = "x-api-key"
HTTP_TIMEOUT = 60                   # seconds per request
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Audio plan / merge
AUDIO_EXTENSION = ".mp3"
TIME_TOLERANCE = 0.0001             # seconds of slack for gap/overlap/length checks
SILENCE_SAMPLE_RATE = 44100
SILENCE_CHANNEL_LAYOUT = "stereo"

# Title / ending clips
TITLE_DURATION = 5.0

# Default file names
OUTPUT_DIR = "./output"
VIDEO_OUTPUT = "./output/output_video-only.mp4"
AUDIO_CONFIG_OUTPUT = "audio-config.json"
MERGE_OUTPUT = "output_video-and-audio.mp4"
TITLE_OUTPUT = "title.mp4"
ENDING_OUTPUT = "ending.mp4"

VERSION = "0.1.0"

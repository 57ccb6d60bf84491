"""
Library import: register audio files from the music directory as songs
"""
import logging
import re
from pathlib import Path

from mutagen import File as MutagenFile
from mutagen import MutagenError

from database import store

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = {'.mp3', '.flac', '.wav', '.aac', '.m4a', '.ogg'}

_whitespace_collapse = re.compile(r"\s+")


def normalize_string(value: str | None) -> str | None:
    """Trim and collapse whitespace for user-facing metadata strings."""
    if not value:
        return None
    collapsed = _whitespace_collapse.sub(' ', value).strip()
    return collapsed or None


def extract_metadata(file_path: Path) -> dict[str, float | str | None]:
    """Use mutagen to read title/artist/album/duration, falling back to the file name."""
    metadata = {
        'title': None,
        'artist': None,
        'album': None,
        'duration': None,
    }

    try:
        audio = MutagenFile(file_path.as_posix())
    except MutagenError as exc:
        logger.warning('Metadata extraction failed for %s: %s', file_path.name, exc)
        audio = None

    if audio is not None:
        if getattr(audio.info, 'length', None):
            metadata['duration'] = round(float(audio.info.length), 2)

        tags = audio.tags or {}

        def pick_first(*keys: str) -> str | None:
            for key in keys:
                value = tags.get(key)
                if isinstance(value, list) and value:
                    return str(value[0])
                if value:
                    return str(value)
            return None

        metadata['title'] = normalize_string(pick_first('TIT2', 'title', '\xa9nam'))
        metadata['artist'] = normalize_string(pick_first('TPE1', 'artist', '\xa9ART'))
        metadata['album'] = normalize_string(pick_first('TALB', 'album', '\xa9alb'))

    if not metadata['title']:
        metadata['title'] = file_path.stem
    return metadata


def import_library(music_dir: str | Path) -> list:
    """Create a Song for every audio file under music_dir that is not yet known."""
    root = Path(music_dir)
    if not root.is_dir():
        logger.warning('Music directory %s does not exist', root)
        return []

    created = []
    for file_path in sorted(root.rglob('*')):
        if not file_path.is_file() or file_path.suffix.lower() not in AUDIO_EXTENSIONS:
            continue
        file_name = file_path.relative_to(root).as_posix()
        if store.find_song_by_file(file_name) is not None:
            continue
        fields = {key: value for key, value in extract_metadata(file_path).items() if value is not None}
        fields['fileName'] = file_name
        created.append(store.create_song(fields))

    logger.info('Imported %d new songs from %s', len(created), root)
    return created


if __name__ == '__main__':
    from app import create_app

    app = create_app()
    with app.app_context():
        songs = import_library(app.config['MUSIC_DIR'])
    print(f"Imported {len(songs)} songs")

"""
Static vocabulary for query understanding.
Genre, language, intent and mood lookup tables shared by the parser, the LLM merge
step, the query builder and the mood filter. Every table is read-only.
"""

from types import MappingProxyType  # read-only dict views
from typing import FrozenSet, Mapping, Tuple

from .models import MoodRule


def _frozen(mapping: dict) -> Mapping:
	"""Wrap a dict literal so callers cannot mutate the shared table."""
	return MappingProxyType(mapping)


TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"

# Canonical genre name -> TMDB genre id (the closed genre vocabulary)
GENRE_NAME_TO_ID: Mapping[str, int] = _frozen({
	'Action': 28,
	'Adventure': 12,
	'Animation': 16,
	'Comedy': 35,
	'Crime': 80,
	'Documentary': 99,
	'Drama': 18,
	'Family': 10751,
	'Fantasy': 14,
	'History': 36,
	'Horror': 27,
	'Music': 10402,
	'Mystery': 9648,
	'Romance': 10749,
	'Science Fiction': 878,
	'Thriller': 53,
	'War': 10752,
	'Western': 37,
})

GENRE_ID_TO_NAME: Mapping[int, str] = _frozen({gid: name for name, gid in GENRE_NAME_TO_ID.items()})

# Language keyword -> ISO 639-1 code (scan order matters: first hit wins)
LANGUAGE_KEYWORDS: Mapping[str, str] = _frozen({
	'bollywood': 'hi', 'hindi': 'hi', 'hindi film': 'hi',
	'korean': 'ko', 'k-drama': 'ko', 'kdrama': 'ko',
	'french': 'fr',
	'japanese': 'ja', 'anime': 'ja',
	'spanish': 'es',
	'tamil': 'ta',
	'telugu': 'te',
	'marathi': 'mr',
	'punjabi': 'pa',
	'chinese': 'zh',
})

LANGUAGE_TO_REGION: Mapping[str, str] = _frozen({
	'hi': 'IN',
	'ta': 'IN',
	'te': 'IN',
	'mr': 'IN',
	'pa': 'IN',
	'ko': 'KR',
	'ja': 'JP',
	'zh': 'CN',
	'fr': 'FR',
	'es': 'ES',
})

# User phrasing -> canonical genre name
GENRE_KEYWORDS: Mapping[str, str] = _frozen({
	'thriller': 'Thriller', 'thrillers': 'Thriller',
	'comedy': 'Comedy', 'comedies': 'Comedy', 'funny': 'Comedy',
	'horror': 'Horror',
	'romance': 'Romance', 'romantic': 'Romance',
	'action': 'Action',
	'drama': 'Drama',
	'sci-fi': 'Science Fiction', 'science fiction': 'Science Fiction', 'scifi': 'Science Fiction',
	'animation': 'Animation', 'animated': 'Animation',
	'documentary': 'Documentary',
	'mystery': 'Mystery',
	'adventure': 'Adventure',
	'family': 'Family',
	'fantasy': 'Fantasy',
	'crime': 'Crime',
	'war': 'War',
	'western': 'Western',
	'musical': 'Music', 'music': 'Music',
})

TOP_KEYWORDS: FrozenSet[str] = frozenset({
	'top', 'most', 'topmost', 'best', 'highest', 'rated', 'rating', 'imdb',
	'top-rated', 'toprated', 'critically',
})

LATEST_KEYWORDS: FrozenSet[str] = frozenset({
	'latest', 'new', 'recent', 'fresh', 'trending', 'viral',
})

AWARD_KEYWORDS: FrozenSet[str] = frozenset({
	'oscar', 'oscars', 'award', 'awards', 'best-picture', 'best picture',
})

TITLE_HINTS: Tuple[str, ...] = ('title:', 'titled', 'called', 'named', '"', "'")

SUBJECTIVE_KEYWORDS: FrozenSet[str] = frozenset({
	'feel-good', 'feel good', 'cozy', 'chill', 'comfort', 'vibes', 'vibe', 'easy',
	'light', 'fun', 'uplifting', 'wholesome', 'gritty', 'bittersweet', 'slow-burn',
	'slow burn', 'mind-bending', 'mind bending', 'dark', 'intense', 'romantic',
	'family', 'scary', 'sad', 'emotional', 'tearjerker', 'tear jerker',
	'heartbreaking', 'tragic', 'melancholic', 'melancholy', 'somber', 'weepy',
	'depressing', 'nostalgic', 'anxious', 'tense', 'hopeful', 'optimistic',
	'lonely', 'isolation', 'healing', 'cathartic', 'angry', 'rage', 'revenge',
	'vengeful', 'mysterious', 'eerie', 'whimsical', 'quirky', 'absurd', 'surreal',
	'inspiring', 'motivational', 'heartwarming', 'comforting', 'soothing',
	'dark comedy', 'epic', 'grand', 'sweeping', 'suspenseful', 'edge-of-seat',
	'edge of seat', 'contemplative', 'thoughtful', 'reflective', 'tragic romance',
})

# Tokens that never contribute to a title guess
GENERIC_WORDS: FrozenSet[str] = frozenset({
	'movie', 'movies', 'film', 'films', 'cinema', 'watch', 'watching', 'show',
	'shows', 'most', 'topmost', 'volume', 'part', 'episode', 'chapter', 'right',
})

# Spelled-out decades -> first year; kept exactly as the deployed app reads them
DECADE_WORDS: Tuple[Tuple[str, int], ...] = (
	('twenties', 2020),
	('thirties', 2030),
	('forties', 2040),
	('fifties', 2050),
	('sixties', 2060),
	('seventies', 2070),
	('eighties', 1980),
	('nineties', 1990),
)

# Ordered mood triggers: (canonical tag, phrases that activate it)
MOOD_TRIGGERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
	('feel_good', ('feel good', 'feel-good')),
	('cozy', ('cozy', 'comfort', 'chill')),
	('wholesome', ('wholesome',)),
	('gritty', ('gritty',)),
	('dark', ('dark',)),
	('intense', ('intense',)),
	('romantic', ('romantic', 'romance')),
	('family', ('family', 'kids', 'children')),
	('scary', ('scary', 'horror')),
	('bittersweet', ('bittersweet',)),
	('slow_burn', ('slow burn', 'slow-burn')),
	('mind_bending', ('mind bending', 'mind-bending')),
	('uplifting', ('uplifting', 'inspiring')),
	('sad', (
		'sad', 'emotional', 'tearjerker', 'tear jerker', 'heartbreaking', 'tragic',
		'melancholic', 'melancholy', 'somber', 'weepy', 'depressing',
	)),
	('nostalgic', ('nostalgic',)),
	('anxious', ('anxious', 'anxiety')),
	('tense', ('tense', 'tension')),
	('hopeful', ('hopeful', 'optimistic')),
	('lonely', ('lonely', 'isolation', 'solitude')),
	('healing', ('healing',)),
	('cathartic', ('cathartic',)),
	('angry', ('angry', 'rage', 'fury')),
	('revenge', ('revenge', 'vengeful', 'vengeance')),
	('mysterious', ('mysterious', 'mystery')),
	('eerie', ('eerie', 'creepy', 'unsettling')),
	('whimsical', ('whimsical', 'quirky')),
	('absurd', ('absurd', 'surreal')),
	('inspiring', ('inspiring', 'motivational')),
	('heartwarming', ('heartwarming',)),
	('comforting', ('comforting', 'soothing')),
	('dark_comedy', ('dark comedy', 'black comedy')),
	('epic', ('epic', 'grand', 'sweeping')),
	('suspenseful', ('suspenseful', 'edge of seat', 'edge-of-seat')),
	('contemplative', ('contemplative', 'thoughtful', 'reflective')),
	('romantic_tragic', ('tragic romance', 'star-crossed')),
)

# Free-text mood phrases from the LLM -> canonical tag; first matching rule wins per phrase
LLM_MOOD_PHRASES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
	(('feel',), 'feel_good'),
	(('dark',), 'dark'),
	(('gritty',), 'gritty'),
	(('intense', 'tense', 'suspense'), 'intense'),
	(('anxious', 'anxiety'), 'anxious'),
	(('scary', 'horror'), 'scary'),
	(('romantic', 'romance'), 'romantic'),
	(('family', 'kids'), 'family'),
	(('bittersweet', 'melancholy', 'melancholic'), 'bittersweet'),
	(('slow',), 'slow_burn'),
	(('mind',), 'mind_bending'),
	(('uplifting', 'inspiring', 'hopeful', 'optimistic'), 'uplifting'),
	(('sad', 'tear', 'heartbreak', 'tragic', 'somber', 'weep'), 'sad'),
	(('nostalgic',), 'nostalgic'),
	(('lonely', 'isolation'), 'lonely'),
	(('healing', 'cathartic'), 'healing'),
	(('angry', 'rage', 'revenge', 'vengeful'), 'angry'),
	(('mysterious', 'eerie'), 'mysterious'),
	(('whimsical', 'quirky'), 'whimsical'),
	(('absurd', 'surreal'), 'absurd'),
	(('heartwarming',), 'heartwarming'),
	(('comforting', 'soothing'), 'comforting'),
	(('dark comedy', 'black comedy'), 'dark_comedy'),
	(('epic', 'grand', 'sweeping'), 'epic'),
	(('contemplative', 'thoughtful', 'reflective'), 'contemplative'),
	(('tragic romance', 'star-crossed'), 'romantic_tragic'),
)


def _rule(include, exclude, keywords) -> MoodRule:
	return MoodRule(include=tuple(include), exclude=tuple(exclude), keywords=tuple(keywords))


MOOD_RULES: Mapping[str, MoodRule] = _frozen({
	'feel_good': _rule(
		['Comedy', 'Family', 'Romance', 'Animation', 'Music'],
		['Horror', 'Thriller', 'Crime', 'War'],
		['feel good', 'uplifting', 'heartwarming', 'joy', 'hope', 'inspiring'],
	),
	'cozy': _rule(['Family', 'Romance', 'Comedy'], ['Horror', 'Thriller', 'War'], ['cozy', 'comfort', 'warm', 'gentle']),
	'wholesome': _rule(['Family', 'Comedy', 'Romance'], ['Horror', 'Crime', 'Thriller'], ['wholesome', 'kind', 'sweet']),
	'gritty': _rule(['Crime', 'Thriller', 'Drama'], ['Family', 'Animation'], ['gritty', 'raw', 'dark']),
	'dark': _rule(['Thriller', 'Crime', 'Horror', 'Mystery'], ['Family'], ['dark', 'bleak', 'grim']),
	'intense': _rule(['Thriller', 'Action', 'Crime', 'War'], ['Family'], ['intense', 'edge of your seat', 'tense']),
	'romantic': _rule(['Romance', 'Drama', 'Comedy'], ['Horror'], ['romantic', 'love', 'relationship']),
	'family': _rule(['Family', 'Animation', 'Comedy'], ['Horror', 'Thriller'], ['family', 'kids', 'children']),
	'scary': _rule(['Horror', 'Thriller', 'Mystery'], ['Family'], ['scary', 'horror', 'frightening']),
	'bittersweet': _rule(['Drama', 'Romance'], ['Horror'], ['bittersweet', 'poignant', 'melancholy']),
	'sad': _rule(
		['Drama', 'Romance', 'Music'],
		['Comedy', 'Action', 'Horror'],
		['sad', 'heartbreaking', 'tragic', 'melancholy', 'grief', 'loss', 'tearjerker'],
	),
	'nostalgic': _rule(['Drama', 'Romance', 'Comedy'], ['Horror'], ['nostalgic', 'memory', 'past', 'reminisce']),
	'anxious': _rule(['Thriller', 'Mystery', 'Crime', 'Drama'], ['Family', 'Comedy'], ['anxious', 'panic', 'uneasy', 'paranoia']),
	'tense': _rule(['Thriller', 'Mystery', 'Crime'], ['Family', 'Comedy'], ['tense', 'pressure', 'tension']),
	'hopeful': _rule(['Drama', 'Family', 'Comedy'], ['Horror', 'Crime'], ['hopeful', 'optimistic', 'hope']),
	'optimistic': _rule(['Drama', 'Family', 'Comedy'], ['Horror', 'Crime'], ['optimistic', 'positive', 'bright']),
	'lonely': _rule(['Drama', 'Romance'], ['Comedy'], ['lonely', 'isolation', 'solitude']),
	'healing': _rule(['Drama', 'Romance'], ['Horror', 'Thriller'], ['healing', 'recovery', 'cathartic']),
	'cathartic': _rule(['Drama', 'Romance'], ['Horror', 'Thriller'], ['cathartic', 'release', 'emotional']),
	'angry': _rule(['Action', 'Crime', 'Thriller', 'Drama'], ['Family'], ['angry', 'rage', 'fury']),
	'revenge': _rule(['Action', 'Crime', 'Thriller', 'Drama'], ['Family'], ['revenge', 'vengeful', 'vengeance', 'payback']),
	'mysterious': _rule(['Mystery', 'Thriller', 'Horror'], ['Family', 'Comedy'], ['mysterious', 'enigmatic', 'eerie']),
	'eerie': _rule(['Horror', 'Mystery', 'Thriller'], ['Family'], ['eerie', 'creepy', 'unsettling']),
	'whimsical': _rule(['Comedy', 'Family', 'Fantasy', 'Animation'], ['Horror', 'War'], ['whimsical', 'quirky', 'playful']),
	'absurd': _rule(['Comedy', 'Fantasy', 'Science Fiction'], ['Horror'], ['absurd', 'surreal', 'nonsense']),
	'inspiring': _rule(['Drama', 'Family', 'Music'], ['Horror', 'Crime'], ['inspiring', 'motivational', 'triumph']),
	'heartwarming': _rule(['Family', 'Romance', 'Comedy', 'Drama'], ['Horror', 'Crime'], ['heartwarming', 'sweet', 'warming']),
	'comforting': _rule(['Family', 'Romance', 'Comedy'], ['Horror', 'Thriller'], ['comforting', 'soothing', 'gentle']),
	'dark_comedy': _rule(['Comedy', 'Crime', 'Thriller', 'Drama'], ['Family'], ['dark comedy', 'black comedy', 'morbid']),
	'epic': _rule(['Adventure', 'Action', 'Drama', 'Fantasy', 'War'], ['Horror'], ['epic', 'grand', 'sweeping', 'saga']),
	'suspenseful': _rule(['Thriller', 'Mystery', 'Crime'], ['Family', 'Comedy'], ['suspenseful', 'edge of seat', 'edge-of-seat']),
	'contemplative': _rule(['Drama', 'Romance'], ['Horror', 'Action', 'Thriller'], ['contemplative', 'thoughtful', 'reflective']),
	'romantic_tragic': _rule(['Romance', 'Drama'], ['Comedy', 'Horror'], ['tragic romance', 'star-crossed', 'heartbreak']),
	'slow_burn': _rule(['Drama', 'Thriller', 'Mystery'], ['Family'], ['slow burn', 'slow-burn', 'atmospheric']),
	'mind_bending': _rule(['Science Fiction', 'Mystery', 'Thriller'], ['Family'], ['mind-bending', 'mind bending', 'twist', 'surreal']),
	'uplifting': _rule(['Drama', 'Comedy', 'Family'], ['Horror', 'Crime'], ['uplifting', 'inspiring', 'hope']),
})

# A tag implies these further tags
MOOD_EXPANSIONS: Mapping[str, Tuple[str, ...]] = _frozen({
	'feel_good': ('uplifting', 'wholesome', 'cozy'),
	'dark': ('gritty', 'intense', 'mind_bending'),
	'scary': ('dark', 'intense'),
	'romantic': ('bittersweet',),
	'gritty': ('intense',),
	'mind_bending': ('intense',),
	'cozy': ('wholesome',),
	'family': ('wholesome',),
	'sad': ('bittersweet',),
	'nostalgic': ('bittersweet',),
	'anxious': ('tense', 'intense'),
	'tense': ('intense',),
	'hopeful': ('uplifting',),
	'optimistic': ('uplifting',),
	'lonely': ('bittersweet',),
	'healing': ('bittersweet',),
	'cathartic': ('bittersweet',),
	'angry': ('intense',),
	'revenge': ('intense',),
	'mysterious': ('mind_bending', 'eerie'),
	'eerie': ('dark',),
	'whimsical': ('cozy',),
	'absurd': ('mind_bending',),
	'inspiring': ('uplifting',),
	'heartwarming': ('wholesome',),
	'comforting': ('cozy',),
	'dark_comedy': ('gritty',),
	'epic': ('intense',),
	'suspenseful': ('intense',),
	'contemplative': ('bittersweet',),
	'romantic_tragic': ('bittersweet',),
})

# An explicitly requested genre implies these moods
GENRE_TO_MOODS: Mapping[str, Tuple[str, ...]] = _frozen({
	'Thriller': ('intense', 'gritty', 'mind_bending'),
	'Horror': ('scary', 'dark', 'intense'),
	'Comedy': ('feel_good', 'uplifting', 'cozy'),
	'Romance': ('romantic', 'bittersweet'),
	'Family': ('family', 'wholesome'),
	'Animation': ('family', 'wholesome'),
	'Science Fiction': ('mind_bending', 'intense'),
	'Crime': ('gritty', 'dark'),
	'Mystery': ('mind_bending', 'slow_burn'),
	'Drama': ('bittersweet', 'uplifting'),
	'Action': ('intense',),
})

# App categories a pure vibe request can be mapped to
VIBE_CATEGORIES: Tuple[str, ...] = (
	'light_and_fun',
	'imdb_top',
	'oscar',
	'srk',
	'latest',
	'gritty_thrillers',
	'quick_watches',
	'reality_and_drama',
	'whats_viral',
)
DEFAULT_VIBE_CATEGORY = 'imdb_top'

# Streaming providers surfaced on cards, and the display name each is folded into
PROVIDER_NAMES: Mapping[str, str] = _frozen({
	'Netflix': 'Netflix',
	'Amazon Prime Video': 'Amazon Prime Video',
	'Disney Plus': 'Disney+ Hotstar',
	'Disney+ Hotstar': 'Disney+ Hotstar',
	'Hotstar': 'Disney+ Hotstar',
	'JioCinema': 'JioCinema',
	'Jio Cinema': 'JioCinema',
	'Zee5': 'Zee5',
	'ZEE5': 'Zee5',
	'SonyLIV': 'SonyLIV',
	'Apple TV Plus': 'Apple TV+',
	'Apple TV+': 'Apple TV+',
	'MUBI': 'MUBI',
	'Lionsgate Play': 'Lionsgate Play',
})
DEFAULT_WATCH_REGION = 'IN'

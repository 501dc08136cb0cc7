from subroll.features.projects.service.seeding import seed_segments


def test_one_subtitle_per_raw_segment(make_metadata):
    segments = seed_segments(make_metadata())
    subtitles = [s for s in segments if s.is_subtitle]

    assert [s.content for s in subtitles] == [
        "Welcome to our innovation lab today",
        "We build technology for everyone here",
    ]
    assert [s.highlighted_keyword for s in subtitles] == ["innovation", "technology"]
    assert [(s.start_seconds, s.end_seconds) for s in subtitles] == [(0.0, 3.0), (3.0, 6.0)]


def test_broll_only_for_spoken_keywords_with_images(make_metadata):
    metadata = make_metadata(broll_images={
        "technology": "https://img.example/technology.jpg",
        "innovation": None,
        "blockchain": "https://img.example/blockchain.jpg",
    })
    brolls = [s for s in seed_segments(metadata) if s.is_broll]

    # innovation has no image, blockchain is never said
    assert [b.content for b in brolls] == ["technology"]
    assert brolls[0].image_url == "https://img.example/technology.jpg"
    assert (brolls[0].start_seconds, brolls[0].end_seconds) == (3.0, 6.0)


def test_broll_uses_spoken_word_time(make_metadata):
    brolls = [s for s in seed_segments(make_metadata()) if s.is_broll]
    by_keyword = {b.content: b for b in brolls}

    # "technology" is the third word of the second segment: 3.0 + 2 * 0.5
    assert by_keyword["technology"].keyword_timestamp == 4.0
    assert by_keyword["innovation"].keyword_timestamp == 1.5

    estimated = seed_segments(make_metadata(), use_word_timestamps=False)
    assert all(s.keyword_timestamp is None for s in estimated)


def test_toggles_limit_what_is_seeded(make_metadata):
    no_subs = seed_segments(make_metadata(subtitles_enabled=False))
    assert no_subs and all(s.is_broll for s in no_subs)

    no_broll = seed_segments(make_metadata(brolls_enabled=False))
    assert no_broll and all(s.is_subtitle for s in no_broll)

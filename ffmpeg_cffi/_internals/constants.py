"""Fixed build configuration: header whitelist, library components, FFmpeg features."""

# Headers we generate declarations for, relative to the FFmpeg include root.
HEADERS: tuple[str, ...] = (
    "libavcodec/avcodec.h",
    "libavcodec/avfft.h",
    "libavcodec/dv_profile.h",
    "libavcodec/vaapi.h",
    "libavcodec/vorbis_parser.h",
    "libavdevice/avdevice.h",
    "libavfilter/avfilter.h",
    "libavfilter/buffersink.h",
    "libavfilter/buffersrc.h",
    "libavformat/avformat.h",
    "libavformat/avio.h",
    "libavutil/adler32.h",
    "libavutil/aes.h",
    "libavutil/audio_fifo.h",
    "libavutil/avstring.h",
    "libavutil/avutil.h",
    "libavutil/base64.h",
    "libavutil/blowfish.h",
    "libavutil/bprint.h",
    "libavutil/buffer.h",
    "libavutil/camellia.h",
    "libavutil/cast5.h",
    "libavutil/channel_layout.h",
    "libavutil/cpu.h",
    "libavutil/crc.h",
    "libavutil/dict.h",
    "libavutil/display.h",
    "libavutil/downmix_info.h",
    "libavutil/error.h",
    "libavutil/eval.h",
    "libavutil/fifo.h",
    "libavutil/file.h",
    "libavutil/frame.h",
    "libavutil/hash.h",
    "libavutil/hmac.h",
    "libavutil/imgutils.h",
    "libavutil/lfg.h",
    "libavutil/log.h",
    "libavutil/macros.h",
    "libavutil/mathematics.h",
    "libavutil/md5.h",
    "libavutil/mem.h",
    "libavutil/motion_vector.h",
    "libavutil/murmur3.h",
    "libavutil/opt.h",
    "libavutil/parseutils.h",
    "libavutil/pixdesc.h",
    "libavutil/pixfmt.h",
    "libavutil/random_seed.h",
    "libavutil/rational.h",
    "libavutil/replaygain.h",
    "libavutil/ripemd.h",
    "libavutil/samplefmt.h",
    "libavutil/sha.h",
    "libavutil/sha512.h",
    "libavutil/stereo3d.h",
    "libavutil/threadmessage.h",
    "libavutil/time.h",
    "libavutil/timecode.h",
    "libavutil/twofish.h",
    "libavutil/xtea.h",
    "libpostproc/postprocess.h",
    "libswresample/swresample.h",
    "libswscale/swscale.h",
)

# math.h declares these both as enumerators and as macros expanding to them.
SUPPRESSED_MACROS: frozenset[str] = frozenset({
    "FP_NAN",
    "FP_INFINITE",
    "FP_ZERO",
    "FP_SUBNORMAL",
    "FP_NORMAL",
})

# pkg-config names of every library FFmpeg installs.
LIBS: tuple[str, ...] = (
    "libavcodec",
    "libavdevice",
    "libavfilter",
    "libavformat",
    "libavutil",
    "libpostproc",
    "libswresample",
    "libswscale",
)

FFMPEG_GIT_URL = "https://github.com/ffmpeg/ffmpeg"

# Directory that only exists in a complete FFmpeg checkout.
FFMPEG_CHECKOUT_MARKER = "fftools"

# Fixed FFmpeg feature set, applied after the path-dependent configure flags.
CONFIGURE_FEATURE_FLAGS: tuple[str, ...] = (
    "--pkg-config-flags=--static",
    "--extra-libs=-lpthread -lm",
    "--enable-gpl",
    "--enable-libass",
    "--enable-libfdk-aac",
    "--enable-libfreetype",
    "--enable-libmp3lame",
    "--enable-libopus",
    "--enable-libvorbis",
    "--enable-libvpx",
    "--enable-libx264",
    "--enable-libx265",
    "--enable-nonfree",
)

DEFS_FILENAME = "ffmpeg_defs.h"

import asyncio

from seqdiagram.renderers.diagram_renderer import DiagramRenderer
from seqdiagram.schemas import RenderStatus, Theme
from seqdiagram.services.block_processor import CodeBlockProcessor, block_identity
from seqdiagram.services.error_display import EMPTY_BLOCK_MESSAGE
from seqdiagram.utils.hash_cache import HashCache


LOGIN = """Title: Login
participant Browser as B
participant Server as S
B->S: POST /login
S-->B: 200 OK"""


class GatedEngine:
    def __init__(self):
        self.calls = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def render(self, text, theme, token=None):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return "<svg xmlns='http://www.w3.org/2000/svg'/>"


def _processor(engine=None) -> CodeBlockProcessor:
    renderer = DiagramRenderer(
        engine=engine,
        validation_cache=HashCache(max_size=10, ttl_seconds=60),
        render_cache=HashCache(max_size=10, ttl_seconds=60),
        default_theme=Theme.SIMPLE,
    )
    return CodeBlockProcessor(renderer=renderer)


def test_block_identity_is_stable_per_position():
    assert block_identity("notes/a.md", 3) == block_identity("notes/a.md", 3)
    assert block_identity("notes/a.md", 3) != block_identity("notes/a.md", 10)
    assert block_identity("notes/a.md", 3) != block_identity("notes/b.md", 3)


def test_process_renders_and_tags_theme():
    processor = _processor()
    block = asyncio.run(processor.process(LOGIN, "notes/a.md", 3))
    assert block.result.status is RenderStatus.SUCCESS
    assert "sqjs-theme-simple" in block.svg
    assert "Server" in block.svg
    assert block.notices == []
    assert block.block_id == block_identity("notes/a.md", 3)
    assert processor.operations.pending_count() == 0


def test_empty_block_gets_warning_notice():
    block = asyncio.run(_processor().process("   "))
    assert block.result.status is RenderStatus.EMPTY
    assert block.notices == [EMPTY_BLOCK_MESSAGE]


def test_error_block_gets_located_notice():
    block = asyncio.run(_processor().process("Alice talks to Bob"))
    assert block.result.status is RenderStatus.ERROR
    assert "Syntax Error [Line 1]" in block.notices[0]


def test_theme_switch_clears_render_cache_and_rerenders():
    processor = _processor()
    asyncio.run(processor.process(LOGIN))
    assert processor.renderer.render_cache.size() == 1

    processor.set_theme("hand-drawn")
    assert processor.renderer.render_cache.size() == 0

    block = asyncio.run(processor.process(LOGIN))
    assert "sqjs-theme-hand-drawn" in block.svg
    assert "cursive" in block.svg


def test_new_render_for_same_block_supersedes_old_one():
    async def scenario():
        engine = GatedEngine()
        processor = _processor(engine)
        first = asyncio.ensure_future(processor.process(LOGIN, "doc.md", 1))
        await engine.started.wait()
        second = asyncio.ensure_future(processor.process(LOGIN, "doc.md", 1))
        await asyncio.sleep(0)
        engine.release.set()
        return processor, await first, await second

    processor, first, second = asyncio.run(scenario())
    assert first.result.status is RenderStatus.CANCELLED
    assert first.notices == []
    assert second.result.status is RenderStatus.SUCCESS
    assert processor.operations.pending_count() == 0


def test_cancel_all_renders_discards_pending_results():
    async def scenario():
        engine = GatedEngine()
        processor = _processor(engine)
        pending = asyncio.ensure_future(processor.process(LOGIN, "doc.md", 1))
        await engine.started.wait()
        processor.cancel_all_renders()
        engine.release.set()
        return processor, await pending

    processor, block = asyncio.run(scenario())
    assert block.result.status is RenderStatus.CANCELLED
    assert processor.renderer.render_cache.size() == 0
    assert processor.operations.pending_count() == 0

# visualization.py
"""
Handles drawing and the window/event host using Pygame.
"""
import logging
import math
from collections import OrderedDict

import pygame
import numpy as np
from typing import Optional, Sequence, Tuple

from constants import (
    BACKGROUND_COLOR, FADE_ALPHA_TRAILS, FADE_ALPHA_NO_TRAILS, TRAIL_ALPHA,
    TRAIL_WIDTH_RATIO, BLOOM_RADIUS_RATIO, SPECTRUM_MAX_HEIGHT, SPECTRUM_ALPHA,
    INTERACTION_RING_COLOR, INTERACTION_RING_WIDTH, STATS_TEXT_COLOR,
    STATS_FONT_NAME, STATS_FONT_SIZE, STATS_ORIGIN, STATS_LINE_SPACING,
    HUE_BUCKET, BRIGHTNESS_BUCKET, SPRITE_CACHE_LIMIT, FPS, DEFAULT_WINDOW_SIZE
)
from controls import Controls
from particle import ParticleSystem
from utils import hsla_color

# --- Data Contracts ---
#
# class Renderer:
#   - __init__(self, surface: pygame.Surface, display: bool = False)
#     - display: True when `surface` is the window surface, in which case
#       present() flips the display and resize() re-reads the window surface.
#   - Implements the render surface the FrameDriver draws through:
#     fade, draw_particles, draw_spectrum, draw_interaction_ring, draw_stats,
#     draw_mode_banner, resize, present.
#
# class Visualizer:
#   - __init__(self, vis_params: dict)
#     - Side Effects: Initializes Pygame and creates a display surface.
#   - process_events(self, controls: Controls) -> None
#     - Side Effects: Forwards Pygame events to the control layer.
#   - frame_callback(self, controls) -> Callable[[FrameStats], bool]
#     - The per-tick host hook: paces to the target FPS, then drains input.


class Renderer:
    """
    Draws the simulation onto a Pygame surface.
    """
    def __init__(self, surface: pygame.Surface, display: bool = False):
        self.surface = surface
        self.display = display

        # Glow sprites keyed by (hue bucket, brightness bucket, radius), least
        # recently used first.
        self._sprite_cache: "OrderedDict[Tuple[int, int, int], pygame.Surface]" = OrderedDict()
        self.sprite_cache_limit = SPRITE_CACHE_LIMIT

        try:
            self.font = pygame.font.SysFont(STATS_FONT_NAME, STATS_FONT_SIZE)
            self.font_bold = pygame.font.SysFont(STATS_FONT_NAME, STATS_FONT_SIZE, bold=True)
        except pygame.error:
            logging.warning(f"{STATS_FONT_NAME} font not found, falling back to the default font.")
            self.font = pygame.font.Font(None, STATS_FONT_SIZE + 4)
            self.font_bold = pygame.font.Font(None, STATS_FONT_SIZE + 4)

        self._build_layers()
        self.surface.fill(BACKGROUND_COLOR)

    @property
    def size(self) -> Tuple[int, int]:
        return self.surface.get_size()

    def _build_layers(self):
        """(Re)creates the translucent fill and overlay surfaces for the current size."""
        size = self.surface.get_size()
        self.fade_trails = pygame.Surface(size, pygame.SRCALPHA)
        self.fade_trails.fill((*BACKGROUND_COLOR, round(FADE_ALPHA_TRAILS * 255)))
        self.fade_no_trails = pygame.Surface(size, pygame.SRCALPHA)
        self.fade_no_trails.fill((*BACKGROUND_COLOR, round(FADE_ALPHA_NO_TRAILS * 255)))
        # Pygame draw calls write alpha rather than blend, so translucent
        # shapes are drawn here and then blitted.
        self.overlay = pygame.Surface(size, pygame.SRCALPHA)
        logging.debug(f"Render layers built for {size[0]}x{size[1]}.")

    def resize(self, width: int, height: int) -> None:
        if self.display and pygame.display.get_surface() is not None:
            self.surface = pygame.display.get_surface()
        elif self.surface.get_size() != (width, height):
            resized = pygame.Surface((width, height))
            resized.fill(BACKGROUND_COLOR)
            resized.blit(self.surface, (0, 0))
            self.surface = resized
        self._build_layers()

    def fade(self, trails_enabled: bool) -> None:
        """Darkens the previous frame; a lighter fill leaves longer trails."""
        self.surface.blit(self.fade_trails if trails_enabled else self.fade_no_trails, (0, 0))

    def _glow_sprite(self, hue: float, brightness: float, radius: float) -> pygame.Surface:
        """
        Returns a cached radial-gradient sprite: full colour and opacity at the
        centre, fading linearly to transparent at `radius`.
        """
        hue_key = int(hue // HUE_BUCKET) % (360 // HUE_BUCKET)
        light_key = int(round(brightness / BRIGHTNESS_BUCKET))
        r = max(1, int(round(radius)))
        key = (hue_key, light_key, r)

        sprite = self._sprite_cache.get(key)
        if sprite is not None:
            self._sprite_cache.move_to_end(key)
        else:
            red, green, blue, _ = hsla_color(hue_key * HUE_BUCKET, 100, light_key * BRIGHTNESS_BUCKET, 100)
            diameter = 2 * r + 1
            sprite = pygame.Surface((diameter, diameter), pygame.SRCALPHA)
            sprite.fill((red, green, blue, 0))

            offsets = np.arange(diameter) - r
            distance = np.sqrt(offsets[:, np.newaxis]**2 + offsets[np.newaxis, :]**2) / r
            alpha = pygame.surfarray.pixels_alpha(sprite)
            alpha[...] = (np.clip(1.0 - distance, 0.0, 1.0) * 255).astype(np.uint8)
            del alpha  # Unlocks the surface.

            self._sprite_cache[key] = sprite
            while len(self._sprite_cache) > self.sprite_cache_limit:
                self._sprite_cache.popitem(last=False)
        return sprite

    def _draw_trail(self, particles: ParticleSystem, i: int, trail_length: int) -> None:
        """Blends one trail onto the surface through the clear overlay."""
        color = hsla_color(particles.hues[i], 100, particles.brightness[i], TRAIL_ALPHA * 100)
        width = max(1, int(particles.sizes[i] * TRAIL_WIDTH_RATIO))
        points = particles.trail_positions[i, :trail_length].tolist()
        dirty = pygame.draw.lines(self.overlay, color, False, points, width)
        dirty = dirty.inflate(width, width).clip(self.overlay.get_rect())
        self.surface.blit(self.overlay, dirty.topleft, dirty)
        self.overlay.fill((0, 0, 0, 0), dirty)

    def draw_particles(self, particles: ParticleSystem, trails_enabled: bool, bloom_enabled: bool) -> None:
        """Draws each particle's trail and then its body, in storage order."""
        trail_length = particles.trail_length
        draw_trails = trails_enabled and trail_length > 1
        if draw_trails:
            self.overlay.fill((0, 0, 0, 0))

        radius_ratio = BLOOM_RADIUS_RATIO if bloom_enabled else 1
        for i in range(len(particles)):
            if draw_trails:
                self._draw_trail(particles, i, trail_length)
            radius = particles.sizes[i] * radius_ratio
            sprite = self._glow_sprite(particles.hues[i], particles.brightness[i], radius)
            half = sprite.get_width() // 2
            x, y = particles.positions[i]
            self.surface.blit(sprite, (int(x) - half, int(y) - half))

    def draw_spectrum(self, spectrum: Sequence[float]) -> None:
        """One translucent bar per bin along the bottom edge, hue by bin index."""
        bins = len(spectrum)
        if bins == 0:
            return
        width, height = self.size
        bar_width = width / bins
        self.overlay.fill((0, 0, 0, 0))
        for i, value in enumerate(spectrum):
            bar_height = float(value) * SPECTRUM_MAX_HEIGHT
            if bar_height <= 0:
                continue
            color = hsla_color(i / bins * 360.0, 100, 50, SPECTRUM_ALPHA * 100)
            rect = pygame.Rect(
                int(i * bar_width), int(height - bar_height),
                math.ceil(bar_width), math.ceil(bar_height)
            )
            pygame.draw.rect(self.overlay, color, rect)
        self.surface.blit(self.overlay, (0, 0))

    def draw_interaction_ring(self, x: float, y: float, radius: float) -> None:
        self.overlay.fill((0, 0, 0, 0))
        pygame.draw.circle(
            self.overlay, INTERACTION_RING_COLOR, (int(x), int(y)), int(radius), INTERACTION_RING_WIDTH
        )
        self.surface.blit(self.overlay, (0, 0))

    def draw_stats(self, lines: Sequence[str]) -> None:
        x, y = STATS_ORIGIN
        for line in lines:
            text_surf = self.font.render(line, True, STATS_TEXT_COLOR[:3])
            text_surf.set_alpha(STATS_TEXT_COLOR[3])
            self.surface.blit(text_surf, (x, y))
            y += STATS_LINE_SPACING

    def draw_mode_banner(self, title: str, description: str) -> None:
        """Renders the mode name and its description in a box at the bottom-left."""
        padding = 8
        title_surf = self.font_bold.render(title, True, (255, 255, 255))
        text_surf = self.font.render(description, True, (204, 204, 204))
        box_width = max(title_surf.get_width(), text_surf.get_width()) + padding * 2
        box_height = title_surf.get_height() + text_surf.get_height() + padding * 3

        _, height = self.size
        box_rect = pygame.Rect(16, height - box_height - 16, box_width, box_height)
        self.overlay.fill((0, 0, 0, 0))
        pygame.draw.rect(self.overlay, (0, 0, 0, 204), box_rect, border_radius=6)
        pygame.draw.rect(self.overlay, (255, 255, 255, 51), box_rect, 1, border_radius=6)
        self.surface.blit(self.overlay, (0, 0))

        self.surface.blit(title_surf, (box_rect.x + padding, box_rect.y + padding))
        self.surface.blit(
            text_surf,
            (box_rect.x + padding, box_rect.y + padding * 2 + title_surf.get_height())
        )

    def present(self) -> None:
        if self.display:
            pygame.display.flip()


class Visualizer:
    """
    Owns the Pygame window and forwards input to the control layer.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params or {}
        pygame.init()
        pygame.font.init()

        if vis_params.get('fullscreen', False):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = int(vis_params.get('window_width', DEFAULT_WINDOW_SIZE[0]))
            height = int(vis_params.get('window_height', DEFAULT_WINDOW_SIZE[1]))
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption("Particle Playground")
        self.clock = pygame.time.Clock()
        self.fps = int(vis_params.get('fps', FPS))
        self.renderer = Renderer(self.screen, display=True)

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    @property
    def width(self) -> int:
        return self.renderer.size[0]

    @property
    def height(self) -> int:
        return self.renderer.size[1]

    def process_events(self, controls: Controls) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                controls.request_quit()
            elif event.type == pygame.KEYDOWN:
                controls.handle_key(pygame.key.name(event.key))
            elif event.type == pygame.MOUSEMOTION:
                controls.pointer_move(*event.pos)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                controls.pointer_move(*event.pos)
                controls.pointer_down()
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                controls.pointer_up()
            elif event.type == pygame.VIDEORESIZE:
                controls.request_resize(event.w, event.h)

    def frame_callback(self, controls: Controls):
        """Builds the hook the FrameDriver calls after each tick."""
        def on_frame(stats) -> bool:
            self.clock.tick(self.fps)
            self.process_events(controls)
            return True
        return on_frame

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()

# herd_sim/ui/renderer.py
from __future__ import annotations
import math, pygame
from ..sim.config import ARENA, ELEPHANT, FARM, ECONOMY
from ..sim.models import LEVEL_TRANSITION, WON, LOST, EMERGING, CHASING
from ..sim.metrics import hud_fields
from ..sim.deterrents import about_to_expire

# ---------- Colors / Theme ----------
BG_COLOR     = (14,16,20)
FIELD_COLOR  = (45,90,39)
GRID_COLOR   = (55,100,50)
SAFETY_COLOR = (120,220,140)
PANEL_BG     = (10,12,16)

TOPBAR_BG    = (24,26,32)
TOPBAR_LINE  = (54,58,66)

ELEPHANT_COLOR  = (187,187,187)
ABANDONED_COLOR = (240,160,60)
HOUSE_COLOR     = (150,100,60)
VILLAGER_COLORS = {
    EMERGING: (200,200,255),
    CHASING:  (90,140,255),
}
VILLAGER_RETURN = (130,130,170)

# farm tint per damage level
FARM_COLORS = [(200,180,80), (255,153,153), (255,51,51)]

BLOCKING_COLOR = (255,0,0)
AREA_COLOR     = (255,120,0)

# debug force arrows
FORCE_COLORS = {
    "random":    (0,255,0),
    "deterrent": (255,0,0),
    "farm":      (255,255,0),
    "herd":      (0,0,255),
    "migration": (255,140,0),
}

# ---------- Layout knobs ----------
TOPBAR_HEIGHT    = 100
HUD_PAD_X        = 12
HUD_PAD_Y        = 10
PANEL_PADDING    = 12


class Renderer:
    def __init__(self, screen, world_rect: pygame.Rect, panel_rect: pygame.Rect, font_name="Menlo"):
        self.screen = screen
        self.topbar_height = TOPBAR_HEIGHT
        self.resize(world_rect, panel_rect)

        self.font = pygame.font.SysFont(font_name, 14)
        self.bigfont = pygame.font.SysFont(font_name, 18, bold=True)
        self.hugefont = pygame.font.SysFont(font_name, 48, bold=True)

        self.show_ranges = True     # G toggles deterrent range circles
        self.show_forces = False    # F toggles per-elephant force arrows

    def resize(self, world_rect: pygame.Rect, panel_rect: pygame.Rect):
        """Update layout rects after a window resize."""
        self.panel_rect_outer = panel_rect
        self.panel_content = self.panel_rect_outer.inflate(-2*PANEL_PADDING, -2*PANEL_PADDING)
        self.world_rect = pygame.Rect(
            world_rect.x,
            world_rect.y + self.topbar_height,
            world_rect.w,
            max(0, world_rect.h - self.topbar_height)
        )

    # ---------- coordinate helpers ----------
    def _scale(self) -> float:
        return min(self.world_rect.w / ARENA.width, self.world_rect.h / ARENA.height)

    def world_to_screen(self, x, y):
        k = self._scale()
        return int(self.world_rect.x + x * k), int(self.world_rect.y + y * k)

    def screen_to_world(self, sx, sy):
        k = self._scale()
        return (sx - self.world_rect.x) / k, (sy - self.world_rect.y) / k

    def contains(self, sx, sy) -> bool:
        return self.world_rect.collidepoint(sx, sy)

    def _r(self, r: float) -> int:
        return max(1, int(r * self._scale()))

    # ---------- field ----------
    def _draw_topbar(self):
        scr = self.screen.get_rect()
        bar = pygame.Rect(0, 0, scr.w, self.topbar_height)
        pygame.draw.rect(self.screen, TOPBAR_BG, bar)
        pygame.draw.line(self.screen, TOPBAR_LINE, (0, self.topbar_height), (scr.w, self.topbar_height), 1)

    def _draw_field(self, spacing=100.0):
        x0, y0 = self.world_to_screen(0, 0)
        x1, y1 = self.world_to_screen(ARENA.width, ARENA.height)
        pygame.draw.rect(self.screen, FIELD_COLOR, pygame.Rect(x0, y0, x1 - x0, y1 - y0))
        for k in range(int(ARENA.width // spacing) + 1):
            sx, _ = self.world_to_screen(k * spacing, 0)
            pygame.draw.line(self.screen, GRID_COLOR, (sx, y0), (sx, y1), 1)
        for k in range(int(ARENA.height // spacing) + 1):
            _, sy = self.world_to_screen(0, k * spacing)
            pygame.draw.line(self.screen, GRID_COLOR, (x0, sy), (x1, sy), 1)
        # safety edge
        sx, _ = self.world_to_screen(min(ARENA.safety_x, ARENA.width), 0)
        pygame.draw.line(self.screen, SAFETY_COLOR, (sx - 2, y0), (sx - 2, y1), 3)
        pygame.draw.rect(self.screen, (70,75,85), pygame.Rect(x0, y0, x1 - x0, y1 - y0), 2)

    def _draw_farms_and_houses(self, sim):
        fr = self._r(FARM.radius)
        for f in sim.world.farms:
            sx, sy = self.world_to_screen(f.x, f.y)
            col = FARM_COLORS[min(f.damage_level, len(FARM_COLORS) - 1)]
            rect = pygame.Rect(0, 0, int(fr * 2.6), int(fr * 1.6))
            rect.center = (sx, sy)
            pygame.draw.rect(self.screen, col, rect)
            pygame.draw.rect(self.screen, (60,50,20), rect, 1)
            if f.damage_timer > 0:
                frac = min(1.0, f.damage_timer / FARM.damage_threshold_ms)
                bar = pygame.Rect(rect.x, rect.bottom + 2, int(rect.w * frac), 3)
                pygame.draw.rect(self.screen, (255,80,80), bar)
        hr = self._r(18)
        for h in sim.world.houses:
            sx, sy = self.world_to_screen(h.x, h.y)
            pts = [(sx, sy - hr), (sx + hr, sy), (sx + hr, sy + hr), (sx - hr, sy + hr), (sx - hr, sy)]
            pygame.draw.polygon(self.screen, HOUSE_COLOR, pts)

    def _draw_deterrents(self, sim):
        for d in sim.deterrents:
            if not d.active:
                continue
            sx, sy = self.world_to_screen(d.x, d.y)
            col = BLOCKING_COLOR if d.blocking else AREA_COLOR
            if self.show_ranges:
                pygame.draw.circle(self.screen, col, (sx, sy), self._r(d.range), 1)
            if d.blocking:
                pygame.draw.circle(self.screen, col, (sx, sy), self._r(d.body_radius(ECONOMY.blocking_body_scale)))
            # flash when close to expiry
            alpha_on = True
            if about_to_expire(d):
                alpha_on = math.sin(d.duration_remaining / 200.0) > 0
            if alpha_on:
                half = self._r(d.size * 0.5)
                pygame.draw.rect(self.screen, (150,75,0), pygame.Rect(sx - half, sy - half, 2*half, 2*half), 2)

    def _draw_elephant(self, e):
        sx, sy = self.world_to_screen(e.x, e.y)
        r = self._r(ELEPHANT.radius * 0.8)
        col = ABANDONED_COLOR if e.abandoned else ELEPHANT_COLOR
        pygame.draw.circle(self.screen, col, (sx, sy), r)
        # trunk on the heading side
        dirx = -1 if e.vx < 0 else 1
        pygame.draw.line(self.screen, col, (sx + dirx * r, sy), (sx + dirx * (r + 5), sy + 4), 3)
        if self.show_forces and not e.abandoned:
            for name, (fx, fy) in e.last_forces.items():
                mag = math.hypot(fx, fy)
                if mag <= 0.01:
                    continue
                n = min(mag / max(e.speed, 1e-6), 2.0)
                L = 5 + n * 55
                ang = math.atan2(fy, fx)
                ex, ey = sx + math.cos(ang) * L, sy + math.sin(ang) * L
                pygame.draw.line(self.screen, FORCE_COLORS.get(name, (255,255,255)), (sx, sy), (int(ex), int(ey)), 2)

    def _draw_villager(self, v):
        sx, sy = self.world_to_screen(v.x, v.y)
        col = VILLAGER_COLORS.get(v.state, VILLAGER_RETURN)
        pygame.draw.circle(self.screen, col, (sx, sy), self._r(8))

    def draw_world(self, sim):
        self._draw_topbar()
        self._draw_field()
        self._draw_farms_and_houses(sim)
        self._draw_deterrents(sim)
        for e in sim.elephants:
            if e.active:
                self._draw_elephant(e)
        for v in sim.villagers:
            if v.active:
                self._draw_villager(v)

        s = sim.state
        if s.game_state == LEVEL_TRANSITION:
            self._draw_transition_card(sim)
        elif s.game_state in (WON, LOST):
            self._draw_end_card(sim)

    # ---------- overlay cards ----------
    def _overlay(self):
        veil = pygame.Surface(self.world_rect.size, pygame.SRCALPHA)
        veil.fill((0, 0, 0, 200))
        self.screen.blit(veil, self.world_rect.topleft)

    def _center_text(self, font, text, y, color):
        surf = font.render(text, True, color)
        self.screen.blit(surf, (self.world_rect.centerx - surf.get_width() // 2, y))

    def _draw_transition_card(self, sim):
        self._overlay()
        spec = sim.campaign.level_spec()
        cy = self.world_rect.centery
        self._center_text(self.hugefont, f"LEVEL {sim.state.current_level + 1}", cy - 90, (255,255,255))
        self._center_text(self.bigfont, spec.name, cy - 25, (251,191,36))
        self._center_text(self.font, f"{spec.farms} Farms - {spec.houses} Houses - {len(spec.herds)} Herds",
                          cy + 10, (160,165,175))
        new = sim.catalog.newly_unlocked(sim.state.current_level)
        y = cy + 35
        if new:
            self._center_text(self.font, "New Deterrents Unlocked: " + ", ".join(d.name for d in new), y, (200,200,210))
            y += 20
            for d in new:
                self._center_text(self.font, f"{d.name}: {d.description}", y, (160,165,175))
                y += 18
        self._center_text(self.bigfont, "Press [SPACE] to continue", y + 20, (148,163,184))

    def _draw_end_card(self, sim):
        self._overlay()
        s = sim.state
        title = "VICTORY" if s.game_state == WON else "DEFEAT"
        col = (74,222,128) if s.game_state == WON else (239,68,68)
        cy = self.world_rect.centery
        self._center_text(self.hugefont, title, cy - 60, col)
        self._center_text(self.bigfont, hud_fields(sim)["status"], cy + 5, (220,220,230))
        self._center_text(self.font, f"Success rate: {round(s.success_rate() * 100)}%   (R to restart)",
                          cy + 35, (160,165,175))

    # ---------- side panel: deterrent menu ----------
    def draw_panel(self, sim):
        pr = self.panel_rect_outer
        pc = self.panel_content
        pygame.draw.rect(self.screen, PANEL_BG, pr)
        pygame.draw.rect(self.screen, (70,75,85), pr, 2)
        self.screen.blit(self.bigfont.render("Deterrents", True, (220,220,230)), (pc.x, pc.y))
        y = pc.y + 28
        budget = sim.state.budget
        for i, spec in enumerate(sim.catalog.available(sim.state.current_level)):
            selected = sim.selected_deterrent == spec.kind
            affordable = budget >= spec.cost
            col = (250,250,255) if selected else ((190,195,205) if affordable else (100,100,110))
            marker = ">" if selected else " "
            kind = "blocks" if spec.blocking else "area"
            line = f"{marker}{i + 1}  {spec.name} - Rs.{spec.cost}"
            self.screen.blit(self.font.render(line, True, col), (pc.x, y))
            dur = round(spec.duration / 1000)
            dur_s = f"{round(dur / 60)}min" if dur > 60 else f"{dur}s"
            sub = f"     {int(spec.effectiveness)}% {kind}, {dur_s}, {int(spec.range)}px"
            self.screen.blit(self.font.render(sub, True, (140,145,155)), (pc.x, y + 16))
            y += 38
        y += 10
        self.screen.blit(self.font.render("Esc/X clear selection", True, (140,145,155)), (pc.x, y))

    # ---------- HUD ----------
    def draw_hud(self, sim, sim_speed, paused, rec_enabled, last_cue: str = ""):
        f = hud_fields(sim)
        lines = [
            f"Budget: Rs.{f['budget']}   Level: {f['level']} ({f['level_name']})   Herd: {f['herd']}  [{f['herd_progress']}]",
            f"Saved: {f['saved']}   Lost: {f['lost']}   Lost this herd: {f['lost_this_herd']}   "
            f"Damaged farms: {f['damaged_farms']}   Success: {f['success_rate']}%",
            f"{f['status']}   Speed: {sim_speed} ticks/frame  {'PAUSED' if paused else ''}  "
            f"{'REC ON' if rec_enabled else 'REC OFF'}   {last_cue}",
            "Controls:",
            " Space continue   1-9 pick deterrent   Click place   P pause   [ ] speed   F forces   G ranges",
            " V toggle record   C clear record   S save NPZ   R restart   Q quit",
        ]
        x = HUD_PAD_X
        y = HUD_PAD_Y
        for i, s in enumerate(lines):
            col = (225,225,235) if i < 3 else (170,175,185)
            self.screen.blit(self.font.render(s, True, col), (x, y))
            y += 16

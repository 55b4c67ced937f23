# herd_sim/ui/app.py
from __future__ import annotations
import pygame, random
from .renderer import Renderer, BG_COLOR
from .recorder import Recorder
from .csv_writer import HerdCsvLogger
from ..sim.engine import build_simulation
from ..sim.config import ARENA, SIM
from ..sim.models import LEVEL_TRANSITION

NUMBER_KEYS = [pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4, pygame.K_5,
               pygame.K_6, pygame.K_7, pygame.K_8, pygame.K_9]

def _progress_key(sim):
    s = sim.state
    return (s.current_level, s.current_herd, s.game_state)

def run_ui(levels_path: str = SIM.levels_path, deterrents_path: str = SIM.deterrents_path,
           seed: int = SIM.seed):
    pygame.init()
    pygame.display.set_caption("Elephant Migration - Deterrent Campaign")
    W, H = 1400, 820
    screen = pygame.display.set_mode((W, H), pygame.RESIZABLE | pygame.SCALED)
    clock = pygame.time.Clock()

    def layout():
        w, h = screen.get_size()
        panel_w = int(w * 0.2)
        world_rect = pygame.Rect(10, 10, w - panel_w - 30, h - 20)
        panel_rect = pygame.Rect(w - panel_w - 10, 110, panel_w, h - 120)
        return world_rect, panel_rect

    world_rect, panel_rect = layout()

    logger = HerdCsvLogger(herds_path="runs/ui_herds.csv", cues_path="runs/ui_cues.csv", enable_cues=True)
    last_cue = [""]

    def new_sim(s):
        sim = build_simulation(levels_path, deterrents_path, seed=s)
        logger.attach(sim)
        sim.bus.subscribe(lambda cue, payload: last_cue.__setitem__(0, cue))
        return sim

    sim = new_sim(seed)
    renderer = Renderer(screen, world_rect, panel_rect)
    recorder = Recorder(enabled=False, stride_steps=4, arena=(ARENA.width, ARENA.height), tick_ms=ARENA.tick_ms)

    paused = False
    sim_speed = 1  # ticks/frame
    running = True

    while running:
        clock.tick(60)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode(e.size, pygame.RESIZABLE | pygame.SCALED)
                world_rect, panel_rect = layout()
                renderer.screen = screen
                renderer.resize(world_rect, panel_rect)
            elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                if renderer.contains(*e.pos) and sim.selected_deterrent is not None:
                    x, y = renderer.screen_to_world(*e.pos)
                    sim.place_deterrent(x, y)
            elif e.type == pygame.KEYDOWN:
                if e.key == pygame.K_q: running = False
                elif e.key in (pygame.K_ESCAPE, pygame.K_x): sim.clear_selection()
                elif e.key == pygame.K_SPACE:
                    if sim.state.game_state == LEVEL_TRANSITION:
                        sim.continue_level()
                elif e.key == pygame.K_p: paused = not paused
                elif e.key == pygame.K_r:
                    sim = new_sim(random.randint(0, 1_000_000))
                    recorder.clear()
                    paused = False
                elif e.key == pygame.K_LEFTBRACKET:
                    sim_speed = max(1, sim_speed - 1)
                elif e.key == pygame.K_RIGHTBRACKET:
                    sim_speed = min(20, sim_speed + 1)
                elif e.key in NUMBER_KEYS:
                    idx = NUMBER_KEYS.index(e.key)
                    avail = sim.catalog.available(sim.state.current_level)
                    if idx < len(avail):
                        sim.select_deterrent(avail[idx].kind)
                elif e.key == pygame.K_f: renderer.show_forces = not renderer.show_forces
                elif e.key == pygame.K_g: renderer.show_ranges = not renderer.show_ranges
                elif e.key == pygame.K_v: recorder.toggle()
                elif e.key == pygame.K_c: recorder.clear()
                elif e.key == pygame.K_s: recorder.save_npz()

        if not paused:
            for _ in range(sim_speed):
                before = _progress_key(sim)
                if not sim.tick():
                    break
                if _progress_key(sim) != before:
                    logger.append_herd(sim, notes=f"from L{before[0] + 1}H{before[1] + 1}")
            recorder.maybe_capture(sim)

        screen.fill(BG_COLOR)
        renderer.draw_world(sim)
        renderer.draw_hud(sim, sim_speed, paused, recorder.enabled, last_cue[0])
        renderer.draw_panel(sim)
        pygame.display.flip()

    pygame.quit()

import pygame
from pygame_runner.window import TextWindow

BLACK_COLOR = (0,0,0)
WHITE_COLOR = (255,255,255)

class PygameWrapper(object):
    """ Acts as an interface to our pygame UI.

        The UI has a one line status window across the top and a main window beneath it.
        The runner calls tick() regularly to pump events; it returns False once the OS window
        has been closed. show() replaces the text of the main window.
    """

    def __init__(self,settings):
        """ Open the OS window and create the child text windows """
        pygame.init()
        self.char_dimensions = settings['char_dimensions']
        self.screen = pygame.display.set_mode(settings['dimensions'])
        pygame.display.set_caption(settings.get('caption','tinyvm'))
        self.font = pygame.font.SysFont(settings['font_name'], settings['font_size'])

        self.status_line_window = TextWindow("Status",
                    self.screen,
                    self.font,
                    (0,0),
                    (self.char_dimensions[0], 1),
                    WHITE_COLOR,
                    BLACK_COLOR)
        self.main_window = TextWindow("Main",
                    self.screen,
                    self.font,
                    (0,1),
                    (self.char_dimensions[0], self.char_dimensions[1]-1),
                    BLACK_COLOR,
                    WHITE_COLOR)

    def tick(self):
        """ Run tick of the UI loop. Return False if we should quit, True if keep running """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False

        self.screen.fill(WHITE_COLOR)
        self.status_line_window.draw()
        self.main_window.draw()
        pygame.display.flip()

        return True

    def show_status(self,msg):
        self.status_line_window.set_lines([msg])

    def show(self,lines):
        self.main_window.set_lines(lines)

    def close(self):
        pygame.quit()
